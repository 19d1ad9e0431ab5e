from .entities import ENEMY_TEMPLATES, Enemy, EnemyTemplate, Entity, EntityManager, Npc, Trap, create_enemy
from .item import Item
from .player import CLASS_TABLE, EQUIP_SLOTS, Player

__all__ = [
    "CLASS_TABLE",
    "ENEMY_TEMPLATES",
    "EQUIP_SLOTS",
    "Enemy",
    "EnemyTemplate",
    "Entity",
    "EntityManager",
    "Item",
    "Npc",
    "Player",
    "Trap",
    "create_enemy",
]
