from .generator import create_item, random_item, roll_rarity

__all__ = ["create_item", "random_item", "roll_rarity"]
