"""
Coupon Service - Validates coupon codes against the coupon book.

The coupon book is a CSV with columns:
    code, type (percentage|fixed), value, active, start_date, end_date
Dates are ISO strings; empty means open-ended.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.fees import CouponValidation

logger = logging.getLogger(__name__)

COUPON_COLUMNS = ['code', 'type', 'value', 'active', 'start_date', 'end_date']
COUPON_TYPES = ('percentage', 'fixed')


def normalize_code(code: str) -> str:
    return str(code).strip().upper()


class CouponBook:
    """
    Coupon codes loaded from CSV.

    Matching:
    1. Code (case-insensitive)
    2. Active flag
    3. start_date <= today <= end_date (empty bounds always match)
    """

    def __init__(self, coupons: Optional[pd.DataFrame] = None, today: Optional[str] = None):
        self.coupons = self._normalize(coupons if coupons is not None else pd.DataFrame(columns=COUPON_COLUMNS))
        self.today = today

    @classmethod
    def from_csv(cls, path: Optional[Path], today: Optional[str] = None) -> 'CouponBook':
        """Load the coupon book; a missing file gives an empty book."""
        if path is None or not path.exists():
            logger.warning("Coupon book not found at %s, coupons disabled", path)
            return cls(today=today)
        df = pd.read_csv(path, dtype=str).fillna('')
        logger.info("Loaded %d coupons from %s", len(df), path)
        return cls(df, today=today)

    @staticmethod
    def _normalize(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df.columns = [str(c).strip() for c in df.columns]
        for col in COUPON_COLUMNS:
            if col not in df.columns:
                df[col] = ''
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip().replace({'nan': '', 'None': ''})
        df['code'] = df['code'].str.upper()
        df['type'] = df['type'].str.lower()
        return df

    def __len__(self) -> int:
        return len(self.coupons)

    def _active_matches(self, code: str) -> pd.DataFrame:
        today = self.today or datetime.now().strftime('%Y-%m-%d')

        matches = self.coupons[self.coupons['code'] == normalize_code(code)]
        matches = matches[matches['active'].str.lower().isin(['true', '1', 'yes', ''])]
        matches = matches[(matches['start_date'] == '') | (matches['start_date'] <= today)]
        matches = matches[(matches['end_date'] == '') | (matches['end_date'] >= today)]
        return matches

    def validate(self, code: str) -> CouponValidation:
        """Validate a coupon code and return its discount."""
        if not code or not str(code).strip():
            return CouponValidation(valid=False)

        matches = self._active_matches(code)
        if matches.empty:
            return CouponValidation(valid=False)

        row = matches.iloc[0]
        coupon_type = row['type']
        value = pd.to_numeric(row['value'], errors='coerce')
        if coupon_type not in COUPON_TYPES or pd.isna(value) or value < 0:
            logger.warning("Coupon %s is misconfigured (type=%r, value=%r)", code, coupon_type, row['value'])
            return CouponValidation(valid=False)

        return CouponValidation(valid=True, type=coupon_type, value=float(value))
