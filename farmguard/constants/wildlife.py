"""
Species catalogue used by the deterrent cascade: the sound frequency each
animal responds to best and how well the deterrent is known to work on it.
"""
import re
from typing import NamedTuple


class SpeciesProfile(NamedTuple):
    name: str
    frequency_hz: int
    effectiveness: str  # low, medium or high


SPECIES_CATALOGUE = {
    'wild_boar': SpeciesProfile('Wild Boar', 18000, 'high'),
    'deer': SpeciesProfile('Deer', 20000, 'high'),
    'nilgai': SpeciesProfile('Nilgai', 19000, 'medium'),
    'monkey': SpeciesProfile('Monkey', 16000, 'medium'),
    'elephant': SpeciesProfile('Elephant', 8000, 'medium'),
    'rabbit': SpeciesProfile('Rabbit', 22000, 'medium'),
    'hare': SpeciesProfile('Hare', 22000, 'medium'),
    'fox': SpeciesProfile('Fox', 25000, 'medium'),
    'jackal': SpeciesProfile('Jackal', 24000, 'medium'),
    'porcupine': SpeciesProfile('Porcupine', 21000, 'low'),
    'rat': SpeciesProfile('Rat', 30000, 'high'),
    'mouse': SpeciesProfile('Mouse', 32000, 'high'),
    'bird': SpeciesProfile('Bird', 4000, 'low'),
    'crow': SpeciesProfile('Crow', 3500, 'low'),
    'parrot': SpeciesProfile('Parrot', 4500, 'low'),
    'stray_dog': SpeciesProfile('Stray Dog', 23000, 'high'),
    'cattle': SpeciesProfile('Cattle', 12000, 'low'),
}

# Used when the species is not in the catalogue
GENERIC_FREQUENCY_HZ = 20000
GENERIC_EFFECTIVENESS = 'medium'

_ALIASES = {
    'boar': 'wild_boar',
    'wild_pig': 'wild_boar',
    'pig': 'wild_boar',
    'monkeys': 'monkey',
    'macaque': 'monkey',
    'birds': 'bird',
    'dog': 'stray_dog',
    'cow': 'cattle',
    'blue_bull': 'nilgai',
}


def normalize_species(value: str | None) -> str:
    """'Wild Boar' / 'wild-boar' / ' wild boar ' -> 'wild_boar'"""
    if not value:
        return 'unknown'
    code = re.sub(r'[^a-z0-9]+', '_', str(value).lower()).strip('_')
    return _ALIASES.get(code, code) or 'unknown'


def get_species_profile(code: str) -> SpeciesProfile:
    profile = SPECIES_CATALOGUE.get(normalize_species(code))
    if profile is None:
        return SpeciesProfile(code.replace('_', ' ').title(), GENERIC_FREQUENCY_HZ, GENERIC_EFFECTIVENESS)
    return profile
