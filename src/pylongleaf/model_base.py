"""
Base class for parameterized stand-level models.

Provides common functionality for loading equation coefficients from the
packaged JSON coefficient file with caching and fallback support.

Usage:
    class BasalAreaModel(ParameterizedModel):
        COEFFICIENT_KEY = 'basal_area'
        FALLBACK_PARAMETERS = {'c1': -4.6484039, 'c2': 0.4452486, 'c3': 1.6526307}
"""
from abc import ABC
from typing import Dict, Any

from .config_loader import COEFFICIENT_FILE, load_coefficient_file
from .exceptions import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)


class ParameterizedModel(ABC):
    """Base class for models with fixed regression coefficients.

    Subclasses must define:
        COEFFICIENT_KEY: str - Equation key under 'equations' in the coefficient file
        FALLBACK_PARAMETERS: dict - Coefficients used when the file is unavailable

    Optional class attributes:
        COEFFICIENT_FILE: str - Name of the JSON file containing coefficients
        REQUIRED_COEFFICIENTS: tuple - Keys that must be present after loading

    Attributes:
        coefficients: The loaded coefficients for the equation
        raw_data: The complete raw data loaded from the coefficient file
    """

    # Subclasses must override these
    COEFFICIENT_FILE: str = COEFFICIENT_FILE
    COEFFICIENT_KEY: str = None
    FALLBACK_PARAMETERS: Dict[str, Any] = {}
    REQUIRED_COEFFICIENTS: tuple = ()

    def __init__(self):
        self.coefficients: Dict[str, Any] = {}
        self.raw_data: Dict[str, Any] = {}
        self._load_parameters()

    def _get_coefficient_data(self) -> Dict[str, Any]:
        """Load coefficient data from JSON file using ConfigLoader with caching.

        Returns:
            Dictionary containing the full coefficient file data,
            or empty dict if file not found.
        """
        if self.COEFFICIENT_KEY is None:
            raise NotImplementedError(
                f"{self.__class__.__name__} must define COEFFICIENT_KEY class attribute"
            )

        try:
            return load_coefficient_file(self.COEFFICIENT_FILE)
        except FileNotFoundError:
            logger.warning("Coefficient file %s not found; using built-in coefficients",
                           self.COEFFICIENT_FILE)
            return {}

    def _load_parameters(self) -> None:
        """Load equation coefficients from configuration.

        Falls back to FALLBACK_PARAMETERS when the file or the equation
        entry is missing.

        Raises:
            ConfigurationError: If a required coefficient is absent
        """
        self.raw_data = self._get_coefficient_data()
        equations = self.raw_data.get('equations', {})

        if self.COEFFICIENT_KEY in equations:
            self.coefficients = equations[self.COEFFICIENT_KEY]
        else:
            self.coefficients = self.FALLBACK_PARAMETERS.copy()

        missing = [key for key in self.REQUIRED_COEFFICIENTS if key not in self.coefficients]
        if missing:
            raise ConfigurationError(
                f"{self.__class__.__name__}: coefficients {missing} missing for "
                f"equation '{self.COEFFICIENT_KEY}'"
            )

    def get_coefficients(self) -> Dict[str, Any]:
        """Get a copy of the coefficients for this equation."""
        return dict(self.coefficients)

    def get_coefficient(self, key: str, default: Any = None) -> Any:
        """Get a specific coefficient value.

        Args:
            key: Coefficient key to retrieve
            default: Default value if key not found

        Returns:
            Coefficient value or default
        """
        return self.coefficients.get(key, default)

    def __repr__(self) -> str:
        """Return string representation of the model."""
        return f"{self.__class__.__name__}(equation='{self.COEFFICIENT_KEY}')"
