"""
Unit conversion for kidney function inputs.

Creatinine, cystatin C and bilirubin are reported either in SI units
(µmol/l, mg/L) or in US conventional units (mg/dl).  The formulas work in
mg/dl (creatinine, bilirubin) and mg/L (cystatin C), so SI inputs are divided
by a molar-mass derived factor before use.

Two creatinine factors are in use: CKD-EPI and MDRD divide by 88.42 while
Cockcroft-Gault divides by 88.4.  Both are kept per formula.
"""
from typing import Optional, Union
import logging

import numpy as np
import pandas as pd

from .categories import UnitSystem

logger = logging.getLogger(__name__)

Numeric = Union[float, np.ndarray, pd.Series]

# µmol/l -> mg/dl
CREATININE_FACTOR = 88.4
CREATININE_FACTOR_CKD_EPI = 88.42
# µmol/l -> mg/dl
BILIRUBIN_FACTOR = 17.1
# mg/L -> mg/dl
CYSTATIN_FACTOR = 10.0


class UnitConverter:
    """Converter between the concentration units used by the formulas."""

    CONVERSIONS = {
        # creatinine: mg/dl <-> µmol/l
        ('mg/dl', 'umol/l', 'creatinine'): lambda x: x * CREATININE_FACTOR,
        ('umol/l', 'mg/dl', 'creatinine'): lambda x: x / CREATININE_FACTOR,

        # cystatin C: mg/dl <-> mg/l
        ('mg/dl', 'mg/l', 'cystatin'): lambda x: x * CYSTATIN_FACTOR,
        ('mg/l', 'mg/dl', 'cystatin'): lambda x: x / CYSTATIN_FACTOR,

        # bilirubin: mg/dl <-> µmol/l
        ('mg/dl', 'umol/l', 'bilirubin'): lambda x: x * BILIRUBIN_FACTOR,
        ('umol/l', 'mg/dl', 'bilirubin'): lambda x: x / BILIRUBIN_FACTOR,

        # height: cm <-> m
        ('cm', 'm'): lambda x: x / 100,
        ('m', 'cm'): lambda x: x * 100,
    }

    UNIT_ALIASES = {
        'mg/dl': ['mg/100ml', 'mg%', 'mg per dl'],
        'umol/l': ['µmol/l', 'μmol/l', 'micromol/l'],
        'mg/l': ['mg per l'],
        'cm': ['centimeter', 'centimeters'],
        'm': ['meter', 'meters'],
    }

    @classmethod
    def normalize_unit(cls, unit: str) -> str:
        """
        Normalise a unit name to its canonical lower-case spelling.

        Args:
            unit: Raw unit string

        Returns:
            Canonical unit name, or the lower-cased input when unknown
        """
        unit_lower = unit.lower().strip()

        if unit_lower in cls.UNIT_ALIASES:
            return unit_lower

        for standard, aliases in cls.UNIT_ALIASES.items():
            if unit_lower in aliases:
                return standard

        return unit_lower

    @classmethod
    def can_convert(cls, from_unit: str, to_unit: str,
                    analyte: Optional[str] = None) -> bool:
        from_norm = cls.normalize_unit(from_unit)
        to_norm = cls.normalize_unit(to_unit)

        if from_norm == to_norm:
            return True
        if (from_norm, to_norm) in cls.CONVERSIONS:
            return True
        return bool(analyte) and (from_norm, to_norm, analyte.lower()) in cls.CONVERSIONS

    @classmethod
    def convert(cls, value: Numeric, from_unit: str, to_unit: str,
                analyte: Optional[str] = None) -> Numeric:
        """
        Convert value(s) between two units.

        Unknown unit pairs are not an error: the value is returned unchanged,
        as if it were already expressed in ``to_unit``.

        Args:
            value: Scalar, array or Series to convert
            from_unit: Source unit
            to_unit: Target unit
            analyte: Substance name for analyte-specific factors

        Returns:
            Converted value(s), same container type as ``value``

        Examples:
            >>> UnitConverter.convert(88.4, 'µmol/l', 'mg/dl', analyte='creatinine')
            1.0
        """
        from_norm = cls.normalize_unit(from_unit)
        to_norm = cls.normalize_unit(to_unit)

        if from_norm == to_norm:
            return value

        converter = cls.CONVERSIONS.get((from_norm, to_norm))
        if converter is None and analyte:
            converter = cls.CONVERSIONS.get((from_norm, to_norm, analyte.lower()))

        if converter is None:
            logger.debug("No conversion from %s to %s (%s); value kept as is",
                         from_unit, to_unit, analyte)
            return value

        return converter(value)


def normalize_creatinine(creat: Numeric, units: str = "SI",
                         factor: float = CREATININE_FACTOR) -> Numeric:
    """Return creatinine in mg/dl; only SI input is divided by ``factor``."""
    if UnitSystem.is_si(units):
        return creat / factor
    return creat


def normalize_cystatin(cystatin: Numeric, units: str = "SI") -> Numeric:
    """Return cystatin C in mg/L; only ``"US"`` (mg/dl) input is multiplied by 10."""
    if units == UnitSystem.US.value:
        return cystatin * CYSTATIN_FACTOR
    return cystatin


def normalize_bilirubin(bili: Numeric, units: str = "SI") -> Numeric:
    """Return bilirubin in mg/dl; only SI input is divided by 17.1."""
    if UnitSystem.is_si(units):
        return bili / BILIRUBIN_FACTOR
    return bili

