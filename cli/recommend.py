"""
CLI tool for carrier recommendations.
Usage: python -m cli.recommend <profile.json> | --profile '{"age": 42, ...}'
"""

import sys
import json
import asyncio
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from carrierllm.pipeline.orchestrator import RecommendationPipeline
from carrierllm.pipeline.models import ClientProfile, RecommendationResult


# ANSI color codes for terminal output
class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_step(step_num: int, name: str, status: str):
    """Print step progress."""
    if status == "running":
        icon = "..."
        color = Colors.YELLOW
    elif status == "complete":
        icon = "done"
        color = Colors.GREEN
    else:
        icon = "!"
        color = Colors.RED

    print(f"  [{step_num}/5] {name:<25} {color}{icon}{Colors.ENDC}")


def fit_color(fit_score: int) -> str:
    if fit_score >= 80:
        return Colors.GREEN
    if fit_score >= 60:
        return Colors.YELLOW
    return Colors.RED


def print_result(result: RecommendationResult):
    """Print the recommendations in a formatted way."""
    if not result.recommendations:
        print(f"\n{Colors.YELLOW}No carrier guidelines matched this profile.{Colors.ENDC}")
        return

    print("\n" + "=" * 70)
    print(f"{Colors.BOLD}{Colors.GREEN}        CARRIER RECOMMENDATIONS{Colors.ENDC}")
    print("=" * 70)

    for rank, rec in enumerate(result.recommendations, start=1):
        color = fit_color(rec.fit_score)
        print(f"\n{Colors.BOLD}{rank}. {rec.carrier_name}{Colors.ENDC} "
              f"{color}{rec.fit_score}% fit{Colors.ENDC} ({rec.confidence} confidence)")
        print(f"   Estimated premium: ${rec.estimated_premium.monthly:,}/month "
              f"(${rec.estimated_premium.annual:,}/year)")
        for pro in rec.reasoning.pros:
            print(f"   {Colors.GREEN}+{Colors.ENDC} {pro}")
        for con in rec.reasoning.cons:
            print(f"   {Colors.YELLOW}-{Colors.ENDC} {con}")
        top_citation = rec.citations[0]
        print(f"   {Colors.CYAN}Source:{Colors.ENDC} {top_citation.document_title} "
              f"(score {top_citation.score:.2f})")

    summary = result.summary
    print(f"\n{Colors.BOLD}Summary:{Colors.ENDC}")
    print(f"  Average fit: {summary.average_fit}%")
    print(f"  Top carrier: {summary.top_carrier_id}")
    print(f"  Carriers evaluated: {summary.total_carriers_evaluated}")
    if summary.tier2_recommended:
        print(f"  {Colors.YELLOW}{summary.notes}{Colors.ENDC}")
    print(f"  {summary.premium_suggestion}")

    if result.metrics:
        print(f"\n{Colors.BOLD}Processing time:{Colors.ENDC} {result.metrics.total_duration_seconds:.1f} seconds")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Recommend life insurance carriers for a client profile",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cli.recommend data/sample_profiles/healthy_40.json
  python -m cli.recommend --profile '{"age": 42, "nicotineUse": "never", "coverageAmount": 750000}'
  cat profile.json | python -m cli.recommend --json
        """
    )

    parser.add_argument(
        "file",
        nargs="?",
        help="Path to a client profile JSON file"
    )
    parser.add_argument(
        "--profile", "-p",
        help="Client profile as a JSON string (alternative to file)"
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Output result as JSON only"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress progress output"
    )

    args = parser.parse_args()

    # Get profile content
    if args.profile:
        raw_profile = args.profile
    elif args.file:
        file_path = Path(args.file)
        if not file_path.exists():
            print(f"{Colors.RED}Error: File not found: {args.file}{Colors.ENDC}")
            sys.exit(1)
        raw_profile = file_path.read_text()
    elif not sys.stdin.isatty():
        raw_profile = sys.stdin.read()
    else:
        parser.print_help()
        sys.exit(1)

    try:
        profile = ClientProfile.model_validate_json(raw_profile)
    except ValidationError as e:
        print(f"{Colors.RED}Error: Invalid client profile:{Colors.ENDC}\n{e}")
        sys.exit(1)

    # Setup progress callback
    def progress_callback(step: int, name: str, status: str):
        if not args.quiet and not args.json:
            print_step(step, name, status)

    if not args.quiet and not args.json:
        print(f"\n{Colors.BOLD}Carrier Recommendation{Colors.ENDC}")
        print("-" * 40)

    try:
        pipeline = RecommendationPipeline(progress_callback=progress_callback)
        result = asyncio.run(pipeline.recommend(profile))
    except Exception as e:
        if args.json:
            print(json.dumps({"success": False, "error": str(e)}))
        else:
            print(f"\n{Colors.RED}Error: {e}{Colors.ENDC}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result.model_dump(by_alias=True), indent=2, default=str))
    else:
        print_result(result)


if __name__ == "__main__":
    main()
