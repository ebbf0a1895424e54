"""
Domain services for Flowspace.

- board_analysis: Semantic graph analysis and validation of whiteboards
- embeddings: Caller-owned vector storage
"""
