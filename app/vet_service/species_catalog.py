"""
Static species catalog.

The catalog is fixed at import time; entries are frozen and listed in
display order.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class Species(BaseModel):
    """A supported animal type and its display metadata."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable identifier used in requests")
    name: str = Field(..., description="Display name")
    icon: str = Field(..., description="Material icon name")
    description: str
    color: str = Field("", description="Accent CSS classes")
    image: str = Field("", description="Cover image URL")


SPECIES: List[Species] = [
    Species(
        id="kopek",
        name="Köpek",
        icon="pets",
        description="Sadık dostlarımızın sağlığı için.",
        color="bg-blue-100 text-blue-600",
        image="https://images.unsplash.com/photo-1517849845537-4d257902454a?auto=format&fit=crop&w=800&q=80",
    ),
    Species(
        id="kedi",
        name="Kedi",
        icon="cruelty_free",
        description="Minik dostlarımızın bakımı ve teşhisi.",
        color="bg-purple-100 text-purple-600",
        image="https://images.unsplash.com/photo-1514888286974-6c03e2ca1dba?auto=format&fit=crop&w=800&q=80",
    ),
    Species(
        id="inek",
        name="İnek",
        icon="agriculture",
        description="Büyükbaş hayvan sağlığı ve verimliliği.",
        color="bg-orange-100 text-orange-600",
        image="https://images.unsplash.com/photo-1546445317-29f4545e9d53?auto=format&fit=crop&w=800&q=80",
    ),
    Species(
        id="koyun",
        name="Koyun/Keçi",
        icon="grass",
        description="Küçükbaş hayvanların hastalık tespiti.",
        color="bg-emerald-100 text-emerald-600",
        image="https://images.unsplash.com/photo-1484557985045-edf25e08da73?auto=format&fit=crop&w=800&q=80",
    ),
    Species(
        id="buzagi",
        name="Buzağı",
        icon="favorite",
        description="Yeni doğanların hassas bakımı.",
        color="bg-rose-100 text-rose-600",
        image="https://images.unsplash.com/photo-1570042225831-d98fa7577f1e?auto=format&fit=crop&w=800&q=80",
    ),
]

_BY_ID: Dict[str, Species] = {species.id: species for species in SPECIES}


def species_ids() -> List[str]:
    return [species.id for species in SPECIES]


def is_known_species(species_id: str) -> bool:
    return species_id in _BY_ID


def get_species(species_id: str) -> Species:
    """
    Look up a catalog entry.

    Raises:
        KeyError: If the id is not in the catalog.
    """
    return _BY_ID[species_id]
