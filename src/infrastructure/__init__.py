"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: LangChain chat models, FAISS, HuggingFace
embeddings, python-jose and the requests-based integrations gateway.
Depends on domain/ only (implements ports). Never imported by application/.
"""
