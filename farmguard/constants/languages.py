"""
Languages the analysis prompt can be rendered in.
"""

# Supported language codes and their full names
SUPPORTED_LANGUAGES = {
    'en': 'English',
    'hi': 'Hindi',
    'kn': 'Kannada',
    'ta': 'Tamil',
    'te': 'Telugu',
    'ml': 'Malayalam',
    'mr': 'Marathi',
    'gu': 'Gujarati',
    'bn': 'Bengali',
    'pa': 'Punjabi',
    'es': 'Spanish',
    'fr': 'French',
    'sw': 'Swahili'
}

# Script each language must be written in
LANGUAGE_SCRIPTS = {
    'hi': 'Devanagari',
    'mr': 'Devanagari',
    'kn': 'Kannada',
    'ta': 'Tamil',
    'te': 'Telugu',
    'ml': 'Malayalam',
    'gu': 'Gujarati',
    'bn': 'Bengali',
    'pa': 'Gurmukhi',
}

# Just the language codes for quick validation
SUPPORTED_LANGUAGE_CODES = list(SUPPORTED_LANGUAGES.keys())

# Default language
DEFAULT_LANGUAGE = 'en'


def is_supported_language(language_code: str) -> bool:
    """Check if a language code is supported"""
    return language_code.lower() in SUPPORTED_LANGUAGE_CODES


def get_language_name(language_code: str) -> str:
    """Get full language name from code"""
    return SUPPORTED_LANGUAGES.get(language_code.lower(), 'Unknown')


def get_language_script(language_code: str) -> str:
    return LANGUAGE_SCRIPTS.get(language_code.lower(), 'Latin')
