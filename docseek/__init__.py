"""docseek - TF-IDF indexing and ranked search over document directories"""

__version__ = "0.1.0"
