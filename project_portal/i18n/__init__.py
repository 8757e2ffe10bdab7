"""
i18n utilities for the portal API messages
"""
import json
from pathlib import Path
from flask import request, g, has_request_context

# Load translation files
_translations = {}
_i18n_dir = Path(__file__).parent


def load_translations():
    """Load all translation files"""
    for locale_file in _i18n_dir.glob('*.json'):
        with open(locale_file, 'r', encoding='utf-8') as f:
            _translations[locale_file.stem] = json.load(f)


load_translations()

SUPPORTED_LOCALES = list(_translations.keys())
DEFAULT_LOCALE = 'en'


def get_locale():
    """
    Get the best matching locale for the current request

    The X-Language header wins over Accept-Language. Outside a request the
    default locale is used.
    """
    if not has_request_context():
        return DEFAULT_LOCALE

    if hasattr(g, 'locale'):
        return g.locale

    custom_lang = request.headers.get('X-Language')
    if custom_lang and custom_lang in SUPPORTED_LOCALES:
        g.locale = custom_lang
        return custom_lang

    # Format: "en-US,en;q=0.9,kn;q=0.8"
    languages = []
    for lang_entry in request.headers.get('Accept-Language', '').split(','):
        parts = lang_entry.strip().split(';')
        base_lang = parts[0].strip().lower().split('-')[0]
        if not base_lang:
            continue

        quality = 1.0
        if len(parts) > 1 and parts[1].strip().startswith('q='):
            try:
                quality = float(parts[1].strip()[2:])
            except ValueError:
                quality = 1.0
        languages.append((base_lang, quality))

    languages.sort(key=lambda x: x[1], reverse=True)
    for lang, _ in languages:
        if lang in SUPPORTED_LOCALES:
            g.locale = lang
            return lang

    g.locale = DEFAULT_LOCALE
    return DEFAULT_LOCALE


def _lookup(locale, keys):
    value = _translations.get(locale, {})
    for k in keys:
        if not isinstance(value, dict) or k not in value:
            return None
        value = value[k]
    return value if isinstance(value, str) else None


def translate(key: str, **params) -> str:
    """
    Get translated message for the current locale

    Args:
        key: Translation key in dot notation (e.g., 'errors.not_found')
        **params: Parameters to format into the translation string

    Returns:
        Translated and formatted message, or the key itself if unknown
    """
    keys = key.split('.')
    value = _lookup(get_locale(), keys) or _lookup(DEFAULT_LOCALE, keys)
    if value is None:
        return key

    if params:
        try:
            value = value.format(**params)
        except (KeyError, ValueError):
            pass  # Return unformatted if formatting fails

    return value


# Shorthand alias
t = translate
