from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
from pydantic import ValidationError

from .data_models import TRAITS, MatchRecord, MatchResult, Profile

logger = logging.getLogger(__name__)


FIELD_ALIASES: Dict[str, List[str]] = {
    "uid": ["uid", "id", "user_id", "User ID"],
    "name": ["name", "Name", "Your name"],
    "role": ["role", "Role", "Are you a mentor or a seeker?"],
    "interests": ["interests", "Interests", "What are your interests?"],
    "location": ["location", "Location", "Where are you based?"],
    "bio": ["bio", "Bio", "Tell us about yourself"],
    "age": ["age", "Age"],
    "extrovert": ["extrovert", "personality_extrovert"],
    "patient": ["patient", "personality_patient"],
    "humorous": ["humorous", "personality_humorous"],
    "empathetic": ["empathetic", "personality_empathetic"],
}


def get_alias_column(df: pd.DataFrame, key: str) -> Optional[str]:
    for candidate in FIELD_ALIASES.get(key, []):
        if candidate in df.columns:
            return candidate
    return None


def resolve_aliases(df: pd.DataFrame) -> Dict[str, Optional[str]]:
    return {key: get_alias_column(df, key) for key in FIELD_ALIASES}


def clean_profiles_df(df: pd.DataFrame) -> pd.DataFrame:
    """Strip headers and collapse whitespace in text cells; blank cells become None."""

    out = df.copy()
    out.columns = [col.strip() if isinstance(col, str) else col for col in out.columns]
    for col in out.columns:
        if pd.api.types.is_object_dtype(out[col]) or pd.api.types.is_string_dtype(out[col]):
            text = (
                out[col]
                .astype(str)
                .str.replace("\n", " ")
                .str.replace(r"\s+", " ", regex=True)
                .str.strip()
            )
            out[col] = (
                text.astype(object)
                .where(out[col].notna(), None)
                .replace({"nan": None, "None": None, "": None})
            )
    return out


def parse_interests(val: Any) -> List[str]:
    """Interests cell as a list: JSON list, '|'-separated or ','-separated text."""
    if val is None:
        return []
    if isinstance(val, float) and pd.isna(val):
        return []
    if isinstance(val, (list, tuple, set, frozenset)):
        return [str(v) for v in val]
    s = str(val).strip()
    if s.startswith("[") and s.endswith("]"):
        try:
            arr = json.loads(s)
            if isinstance(arr, list):
                return [str(v) for v in arr]
        except json.JSONDecodeError:
            pass
        s = s[1:-1]
    parts = s.split("|") if "|" in s else s.split(",")
    return [p.strip() for p in parts if p.strip()]


def _cell(row: pd.Series, col: Optional[str]) -> Any:
    if col is None:
        return None
    val = row.get(col)
    if val is None or (not isinstance(val, (list, str)) and pd.isna(val)):
        return None
    return val


def _text(row: pd.Series, col: Optional[str]) -> Optional[str]:
    val = _cell(row, col)
    return None if val is None else str(val)


def _row_to_payload(row: pd.Series, alias_map: Dict[str, Optional[str]]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": _text(row, alias_map["name"]) or "",
        "role": _text(row, alias_map["role"]),
        "interests": parse_interests(_cell(row, alias_map["interests"])),
        "location": _text(row, alias_map["location"]),
        "bio": _text(row, alias_map["bio"]),
        "personality": {},
    }
    for trait in TRAITS:
        val = _cell(row, alias_map[trait])
        payload["personality"][trait] = None if val is None else float(val)
    uid = _text(row, alias_map["uid"])
    if uid is not None:
        payload["uid"] = uid
    age = _cell(row, alias_map["age"])
    if age is not None:
        payload["age"] = int(float(age))
    if payload["role"] is not None:
        payload["role"] = payload["role"].strip().lower()
    return payload


def profiles_from_frame(df: pd.DataFrame, strict: bool = True) -> List[Profile]:
    """
    Validate every row of a profiles DataFrame into a ``Profile``.

    Args:
        df: Raw or cleaned profiles table.
        strict: Raise on the first batch of invalid rows instead of skipping them.

    Returns:
        Valid profiles, in row order.

    Raises:
        ValueError: In strict mode, if any row fails validation (e.g. missing role).
    """
    cleaned = clean_profiles_df(df)
    alias_map = resolve_aliases(cleaned)
    if alias_map["role"] is None:
        raise ValueError("Profiles table has no role column")

    profiles: List[Profile] = []
    errors: List[str] = []
    for idx, row in cleaned.iterrows():
        try:
            profiles.append(Profile.model_validate(_row_to_payload(row, alias_map)))
        except (ValidationError, ValueError) as e:
            errors.append(f"row {idx}: {e}")

    if errors:
        if strict:
            raise ValueError(f"{len(errors)} invalid profile rows:\n" + "\n".join(errors))
        for err in errors:
            logger.warning("Skipping invalid profile %s", err)
    return profiles


def read_profiles(csv_path: Path, strict: bool = True) -> List[Profile]:
    """Read every column as text; numeric cells (traits, age) are converted per row."""
    df = pd.read_csv(csv_path, dtype=str)
    return profiles_from_frame(df, strict=strict)


def profiles_to_frame(profiles: Iterable[Profile]) -> pd.DataFrame:
    rows = []
    for p in profiles:
        row: Dict[str, Any] = {
            "uid": p.uid,
            "name": p.name,
            "role": p.role,
            "interests": json.dumps(sorted(p.interests), ensure_ascii=False),
            "location": p.location,
            "bio": p.bio,
            "age": p.age,
        }
        for trait in TRAITS:
            row[trait] = getattr(p.personality, trait)
        rows.append(row)
    columns = ["uid", "name", "role", "interests", "location", "bio", "age", *TRAITS]
    return pd.DataFrame(rows, columns=columns)


def matches_to_frame(results: Iterable[MatchResult]) -> pd.DataFrame:
    rows = []
    for r in results:
        row = r.model_dump(exclude={"breakdown"})
        row["common_interests"] = json.dumps(r.breakdown.common_interests, ensure_ascii=False)
        row["motivation_alignment"] = r.breakdown.motivation_alignment
        rows.append(row)
    columns = [
        "user_id",
        "matched_user_id",
        "compatibility_score",
        "interest_score",
        "personality_score",
        "motivation_score",
        "location_score",
        "common_interests",
        "motivation_alignment",
    ]
    return pd.DataFrame(rows, columns=columns)


def records_to_frame(records: Iterable[MatchRecord]) -> pd.DataFrame:
    """Flatten stored match records; insights are kept as a JSON string for CSV stability."""
    rows = []
    for rec in records:
        row = rec.model_dump(mode="json", exclude={"ai_analysis"})
        row["ai_analysis"] = rec.ai_analysis.model_dump_json() if rec.ai_analysis else None
        rows.append(row)
    columns = list(MatchRecord.model_fields.keys())
    return pd.DataFrame(rows, columns=columns)


def records_from_frame(df: pd.DataFrame) -> List[MatchRecord]:
    records: List[MatchRecord] = []
    for row in df.to_dict(orient="records"):
        payload = {k: (None if not isinstance(v, str) and pd.isna(v) else v) for k, v in row.items()}
        for key in ("id", "user1_id", "user2_id"):
            if payload.get(key) is not None:
                payload[key] = str(payload[key])
        analysis = payload.get("ai_analysis")
        if isinstance(analysis, str):
            payload["ai_analysis"] = json.loads(analysis)
        records.append(MatchRecord.model_validate(payload))
    return records
