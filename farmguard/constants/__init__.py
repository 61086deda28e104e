# Constants package
from farmguard.constants.languages import (
    SUPPORTED_LANGUAGES,
    SUPPORTED_LANGUAGE_CODES,
    DEFAULT_LANGUAGE,
    is_supported_language,
    get_language_name,
    get_language_script
)
from farmguard.constants.wildlife import (
    SPECIES_CATALOGUE,
    SpeciesProfile,
    normalize_species,
    get_species_profile
)

__all__ = [
    'SUPPORTED_LANGUAGES',
    'SUPPORTED_LANGUAGE_CODES',
    'DEFAULT_LANGUAGE',
    'is_supported_language',
    'get_language_name',
    'get_language_script',
    'SPECIES_CATALOGUE',
    'SpeciesProfile',
    'normalize_species',
    'get_species_profile'
]
