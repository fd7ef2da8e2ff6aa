from typing import Any, Callable, Dict, List

_PROVIDERS: Dict[str, Callable[[], List[Any]]] = {}

def register_options(name: str):
    def _wrap(fn):
        _PROVIDERS[name] = fn
        return fn
    return _wrap

def has_options(name: str) -> bool:
    return name in _PROVIDERS

def get_options(name: str) -> List[Any]:
    if name not in _PROVIDERS:
        raise ValueError(f"Option provider not found: {name}")
    return list(_PROVIDERS[name]())

# Select fields declare `options: countries` instead of listing every country
@register_options("countries")
def countries() -> List[str]:
    """ Nationalities offered on shareholder and director forms. """
    return sorted([
        "United Arab Emirates",
        "United States",
        "United Kingdom",
        "India",
        "Pakistan",
        "Philippines",
        "Egypt",
        "Jordan",
        "Lebanon",
        "Syria",
        "Bangladesh",
        "Sri Lanka",
        "Nepal",
        "Canada",
        "Australia",
        "Germany",
        "France",
        "Italy",
        "Spain",
        "Netherlands",
        "Sweden",
        "Norway",
        "Denmark",
        "South Africa",
        "Nigeria",
        "Kenya",
        "Ethiopia",
    ])

@register_options("emirates")
def emirates() -> List[str]:
    """ Emirates for residential and office addresses. """
    return [
        "Abu Dhabi",
        "Dubai",
        "Sharjah",
        "Ajman",
        "Umm Al Quwain",
        "Ras Al Khaimah",
        "Fujairah",
    ]
