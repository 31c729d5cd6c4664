"""
CarrierLLM Recommendation Engine

This package matches life-insurance client profiles to carriers using:
- Fireworks AI for embeddings and underwriting analysis
- MongoDB Atlas Vector Search over chunked carrier underwriting guides
- RAG (Retrieval-Augmented Generation) with evidence-cited fit scores
"""

__version__ = "1.0.0"
