"""Preview card rendering"""

from tezos_previews.services.embeds.generator import Card, CardField, CardGenerator

__all__ = ["Card", "CardField", "CardGenerator"]
