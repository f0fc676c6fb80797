from bnpere.adapters.categorize.categorizer import Categorizer, PassthroughCategorizer

__all__ = ["Categorizer", "PassthroughCategorizer"]
