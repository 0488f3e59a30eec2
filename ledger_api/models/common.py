from typing import Optional


def strip_required(v: Optional[str], field: str = "Name") -> Optional[str]:
    """Trim surrounding whitespace. A value made only of whitespace is rejected."""
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError(f'{field} cannot be blank')
    return v
