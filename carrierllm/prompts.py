"""
Centralized LLM prompts for carrier recommendation.
All prompts are defined here for easy maintenance and consistency.
"""

# Per-carrier underwriting analysis
CARRIER_ANALYSIS_SYSTEM = """You are an insurance underwriting expert. You assess how well a client fits a specific life insurance carrier's underwriting guidelines and answer only with JSON."""

CARRIER_ANALYSIS_PROMPT = """Analyze the carrier's underwriting guidelines for the given client profile and provide a carrier fit assessment.

CLIENT PROFILE:
{client_profile}

CARRIER: {carrier_id}
UNDERWRITING GUIDELINES:
{evidence}

IMPORTANT: Respond ONLY with valid JSON in this exact format:
{{
  "fitPct": 85,
  "reasons": ["Age is within preferred range", "No nicotine use", "Excellent health"],
  "advisories": ["High income may require additional documentation"],
  "confidence": 90,
  "product": "Life Insurance",
  "underwritingPath": "standard",
  "citations": [{{"source": "Carrier Guidelines", "text": "Relevant excerpt from guidelines"}}]
}}

Analysis criteria:
- fitPct: 0-100 based on how well the client matches the carrier guidelines
- reasons: 3-5 specific positive factors
- advisories: 0-3 potential concerns or requirements
- confidence: 0-100 based on data quality
- product: "Life Insurance", "Term Life", "IUL", etc.
- underwritingPath: "simplified", "standard", or "complex"
- citations: 1-3 relevant excerpts from the guidelines

Respond with ONLY the JSON object, no other text."""
