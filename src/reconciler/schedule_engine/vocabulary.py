"""Canonical vocabularies for class, trainer and location names."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class Vocabulary:
    """
    A closed list of canonical names plus known OCR/shorthand aliases.

    Attributes:
        name: Vocabulary label used in logs
        canonical: Canonical display names
        aliases: Lower-case alias -> canonical name
        strip_prefixes: Prefixes that may be missing from raw text ("studio ")
        index_first_token: Also index each canonical name by its first word
    """
    name: str
    canonical: Tuple[str, ...]
    aliases: Mapping[str, str] = field(default_factory=dict)
    strip_prefixes: Tuple[str, ...] = ()
    index_first_token: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'aliases', MappingProxyType(dict(self.aliases)))
        unknown = set(self.aliases.values()) - set(self.canonical)
        if unknown:
            raise ValueError(f"{self.name} aliases point at unknown names: {sorted(unknown)}")


CLASS_VOCABULARY = Vocabulary(
    name='class',
    canonical=(
        'Studio Barre 57',
        'Studio Barre 57 Express',
        'Studio Mat 57',
        'Studio Mat 57 Express',
        'Studio Cardio Barre',
        'Studio Cardio Barre Plus',
        'Studio Cardio Barre Express',
        'Studio Foundations',
        'Studio FIT',
        'Studio FIT Express',
        'Studio Back Body Blaze',
        'Studio Back Body Blaze Express',
        'Studio SWEAT In 30',
        'Studio Recovery',
        'Studio Pre/Post Natal',
        'Studio HIIT',
        'Studio HIIT Express',
        'Studio Amped Up!',
        "Studio Trainer's Choice",
        'Studio PowerCycle',
        'Studio PowerCycle Express',
        'Studio Strength Lab',
        'Studio Strength Lab (Full Body)',
        'Studio Strength Lab (Push)',
        'Studio Strength Lab (Pull)',
        'Studio Hosted Class',
        'Studio TABATA',
        'Studio ICY ISOMETRIC',
    ),
    aliases={
        # OCR misreads of "57"
        'mats7': 'Studio Mat 57',
        'mat s7': 'Studio Mat 57',
        'mat57': 'Studio Mat 57',
        'mats57': 'Studio Mat 57',
        'mats7 (express)': 'Studio Mat 57 Express',
        'mats57 (express)': 'Studio Mat 57 Express',
        'mat 57 (express)': 'Studio Mat 57 Express',
        'barres7': 'Studio Barre 57',
        'barre s7': 'Studio Barre 57',
        'barre57': 'Studio Barre 57',
        'barre 57 (express)': 'Studio Barre 57 Express',
        # FIT loses its I
        'ft': 'Studio FIT',
        'f it': 'Studio FIT',
        'fit (express)': 'Studio FIT Express',
        'ft (express)': 'Studio FIT Express',
        'power cycle': 'Studio PowerCycle',
        'powercycle (express)': 'Studio PowerCycle Express',
        'power cycle express': 'Studio PowerCycle Express',
        'cardio barre (express)': 'Studio Cardio Barre Express',
        'cardio barre exp': 'Studio Cardio Barre Express',
        'cardio barre expr': 'Studio Cardio Barre Express',
        'bbb': 'Studio Back Body Blaze',
        'bbb express': 'Studio Back Body Blaze Express',
        'back body blaze (express)': 'Studio Back Body Blaze Express',
        'hiit (express)': 'Studio HIIT Express',
        'strength': 'Studio Strength Lab',
        'strength (pull)': 'Studio Strength Lab (Pull)',
        'strength (push)': 'Studio Strength Lab (Push)',
        'strength (full body)': 'Studio Strength Lab (Full Body)',
        'strength lab full body': 'Studio Strength Lab (Full Body)',
        'sweat 30': 'Studio SWEAT In 30',
        'amped up': 'Studio Amped Up!',
        'trainers choice': "Studio Trainer's Choice",
        'prenatal': 'Studio Pre/Post Natal',
        'pre natal': 'Studio Pre/Post Natal',
    },
    strip_prefixes=('studio ',),
)


TRAINER_VOCABULARY = Vocabulary(
    name='trainer',
    canonical=(
        'Anisha Shah',
        'Atulan Purohit',
        'Janhavi Jain',
        'Karanvir Bhatia',
        'Karan Bhatia',
        'Mrigakshi Jaiswal',
        'Pranjali Jain',
        'Reshma Sharma',
        "Richard D'Costa",
        'Rohan Dahima',
        'Upasna Paranjpe',
        'Saniya Jaiswal',
        'Vivaran Dhasmana',
        'Nishanth Raj',
        'Cauveri Vikrant',
        'Kabir Varma',
        'Simonelle De Vitre',
        'Simran Dutt',
        'Anmol Sharma',
        'Bret Saldanha',
        'Raunak Khemuka',
        'Kajol Kanchan',
        'Pushyank Nahar',
        'Shruti Kulkarni',
        'Poojitha Bhaskar',
        'Siddhartha Kusuma',
        'Chaitanya Nahar',
        'Veena Narasimhan',
        'Sovena Fernandes',
    ),
    aliases={
        'mrigakeni': 'Mrigakshi Jaiswal',
        'pramal': 'Pranjali Jain',
        'nishant': 'Nishanth Raj',
        'simonelle de vitre': 'Simonelle De Vitre',
        'richard dcosta': "Richard D'Costa",
    },
    index_first_token=True,
)


LOCATION_VOCABULARY = Vocabulary(
    name='location',
    canonical=(
        'Kwality House, Kemps Corner',
        'Supreme HQ, Bandra',
        'Kenkere House',
    ),
    aliases={
        'kwality': 'Kwality House, Kemps Corner',
        'kwality house': 'Kwality House, Kemps Corner',
        'kemps': 'Kwality House, Kemps Corner',
        'kemps corner': 'Kwality House, Kemps Corner',
        'supreme': 'Supreme HQ, Bandra',
        'supreme hq': 'Supreme HQ, Bandra',
        'bandra': 'Supreme HQ, Bandra',
        'kenkere': 'Kenkere House',
    },
)


# Words that are never class names on their own
DEFAULT_CLASS_DENYLIST = frozenset({
    'am', 'pm', 'express', 'studio', 'schedule', 'class', 'classes',
    'trainer', 'cover', 'notes', 'tbd', 'tba', 'n/a', 'none', 'cancelled',
})
