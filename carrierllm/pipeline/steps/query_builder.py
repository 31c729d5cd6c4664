"""
Query construction.
Renders a client profile into the natural-language paragraph used for retrieval and prompting.
"""

from typing import List, Optional

from carrierllm.pipeline.models import ClientProfile


DEFAULT_AGE = 35
DEFAULT_GENDER = "Male"
DEFAULT_HEALTH = "Excellent"
DEFAULT_OCCUPATION = "Professional"
DEFAULT_NICOTINE = "never"
DEFAULT_CONDITIONS = "none"
DEFAULT_COVERAGE_AMOUNT = 500_000
DEFAULT_COVERAGE_TYPE = "term"
DEFAULT_TERM_LENGTH = 20
DEFAULT_INCOME = 100_000


def _text(value: Optional[str], default: str) -> str:
    if value is None or not str(value).strip():
        return default
    return str(value).strip()


def _yes_no(value: Optional[bool]) -> str:
    return "yes" if value else "no"


def _money(value: float) -> str:
    return f"${value:,.0f}"


def calculate_bmi(height_inches: Optional[float], weight_pounds: Optional[float]) -> Optional[float]:
    """Body mass index from imperial units, or None if either value is missing."""
    if not height_inches or not weight_pounds:
        return None
    return round(weight_pounds / (height_inches ** 2) * 703, 1)


def _conditions(profile: ClientProfile) -> str:
    conditions = []
    if profile.major_conditions and profile.major_conditions.strip():
        conditions.append(profile.major_conditions.strip())
    if profile.cardiac_history:
        conditions.append("cardiac history")
    if profile.diabetes:
        conditions.append("diabetes")
    if profile.cancer_history:
        conditions.append("cancer history")
    return ", ".join(conditions) or DEFAULT_CONDITIONS


def build_profile_query(profile: ClientProfile) -> str:
    """
    Build the "Client Profile:" paragraph.

    Missing answers fall back to conservative defaults so the query is always
    complete; supplementary lines are added only when the client provided them.

    Args:
        profile: Client intake answers

    Returns:
        Multi-line profile description
    """
    coverage = profile.coverage_amount if profile.coverage_amount else DEFAULT_COVERAGE_AMOUNT
    income = profile.income if profile.income else DEFAULT_INCOME

    lines: List[str] = [
        "Client Profile:",
        f"- Age: {profile.age if profile.age is not None else DEFAULT_AGE}",
        f"- Gender: {_text(profile.gender, DEFAULT_GENDER)}",
        f"- Health Status: {_text(profile.health, DEFAULT_HEALTH)}",
        f"- Occupation: {_text(profile.occupation, DEFAULT_OCCUPATION)}",
        f"- Nicotine Use: {_text(profile.nicotine_use, DEFAULT_NICOTINE)}",
        f"- Health Conditions: {_conditions(profile)}",
        f"- Coverage Amount: {_money(coverage)}",
        f"- Coverage Type: {_text(profile.coverage_type, DEFAULT_COVERAGE_TYPE)}",
        f"- Term Length: {profile.term_length or DEFAULT_TERM_LENGTH} years",
        f"- Income: {_money(income)}",
    ]

    if profile.state and profile.state.strip():
        lines.append(f"- State: {profile.state.strip()}")

    bmi = calculate_bmi(profile.height, profile.weight)
    if bmi is not None:
        lines.append(
            f"- Build: {profile.height:g} in, {profile.weight:g} lbs (BMI {bmi})"
        )

    if profile.marijuana_use and profile.marijuana_use.strip():
        lines.append(f"- Marijuana Use: {profile.marijuana_use.strip()}")
    if profile.dui_history is not None:
        lines.append(f"- DUI History: {_yes_no(profile.dui_history)}")
    if profile.risk_activities and profile.risk_activities.strip():
        lines.append(f"- Risk Activities: {profile.risk_activities.strip()}")

    return "\n".join(lines)
