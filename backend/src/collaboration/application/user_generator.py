import random
from dataclasses import dataclass

ADJECTIVES = [
    "Brave", "Calm", "Clever", "Curious", "Eager", "Gentle",
    "Happy", "Jolly", "Kind", "Lucky", "Quick", "Witty",
]
ANIMALS = [
    "Badger", "Falcon", "Fox", "Heron", "Koala", "Lynx",
    "Otter", "Panda", "Raven", "Tiger", "Walrus", "Wombat",
]
COLORS = [
    "#e6194b", "#3cb44b", "#4363d8", "#f58231", "#911eb4", "#46f0f0",
    "#f032e6", "#bcf60c", "#008080", "#9a6324", "#800000", "#000075",
]


@dataclass
class CollaboratorInfo:
    name: str
    color: str


def generate_user(rng: random.Random | None = None) -> CollaboratorInfo:
    rng = rng or random.Random()
    return CollaboratorInfo(
        name=f"{rng.choice(ADJECTIVES)} {rng.choice(ANIMALS)}",
        color=rng.choice(COLORS),
    )
