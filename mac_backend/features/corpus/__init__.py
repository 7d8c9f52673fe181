"""
Corpus feature - asset records and corpus loading.
"""
from .models import AssetRecord, Corpus, load_corpus
from .fixtures import generate_demo_corpus

__all__ = ["AssetRecord", "Corpus", "load_corpus", "generate_demo_corpus"]
