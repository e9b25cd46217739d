from typing import Dict, Optional

THEMES: Dict[str, str] = {
    'umum': 'Pengetahuan Umum',
    'sains': 'Sains & Teknologi',
    'sejarah': 'Sejarah Indonesia',
    'hiburan': 'Hiburan & Budaya Pop',
}


def theme_label(theme_id: str) -> Optional[str]:
    return THEMES.get(theme_id)
