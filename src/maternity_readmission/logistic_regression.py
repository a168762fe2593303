"""
Logistic Regression Engine

Binary logistic regression trained with fixed-budget, full-batch gradient
descent. There is no convergence check, early stopping or regularization:
the iteration count is the only termination condition.
"""

from typing import Optional, Sequence, Union
import logging

import numpy as np
from scipy.special import expit

from maternity_readmission.exceptions import InvalidInputError, ModelNotFittedError

logger = logging.getLogger(__name__)

ArrayLike = Union[np.ndarray, Sequence[Sequence[float]]]

# expit(±35) is still strictly inside (0, 1) in float64
SIGMOID_CLIP = 35.0
DECISION_THRESHOLD = 0.5
LOG_EVERY = 500


def sigmoid(z):
    """
    Numerically stable logistic function.

    Inputs are clipped to [-35, 35] so the result stays strictly inside
    (0, 1) for any finite z; sigmoid(0) is exactly 0.5.
    """
    clipped = np.clip(z, -SIGMOID_CLIP, SIGMOID_CLIP)
    result = expit(clipped)
    if np.ndim(result) == 0:
        return float(result)
    return result


class LogisticRegressionModel:
    """
    Logistic regression classifier for readmission risk.

    Parameters (weights and bias) are zeroed at the start of every fit() and
    are read-only between fits.
    """

    def __init__(self, learning_rate: float = 0.5, iterations: int = 2000):
        """
        Initialize the model.

        Args:
            learning_rate: Gradient descent step size (must be > 0)
            iterations: Number of full-batch updates (must be >= 0)
        """
        if learning_rate <= 0:
            raise InvalidInputError(f"learning_rate must be positive, got {learning_rate}")
        if isinstance(iterations, bool) or not isinstance(iterations, (int, np.integer)) or iterations < 0:
            raise InvalidInputError(f"iterations must be a non-negative integer, got {iterations!r}")

        self.learning_rate = float(learning_rate)
        self.iterations = int(iterations)

        self._weights: Optional[np.ndarray] = None
        self._bias = 0.0

    @property
    def is_fitted(self) -> bool:
        return self._weights is not None

    @property
    def weights(self) -> np.ndarray:
        self._check_fitted()
        return self._weights.copy()

    @property
    def bias(self) -> float:
        self._check_fitted()
        return self._bias

    @property
    def n_features(self) -> int:
        self._check_fitted()
        return len(self._weights)

    def fit(self, X: ArrayLike, y: Sequence[int]) -> "LogisticRegressionModel":
        """
        Train on the full batch for exactly `iterations` rounds.

        Args:
            X: Feature matrix, one row per sample, uniform row width
            y: Binary labels (0/1 or bool), one per row

        Returns:
            self

        Raises:
            InvalidInputError: If X is empty or ragged, or y does not match
        """
        X_arr, y_arr = self._validate_training_data(X, y)
        n_samples, n_features = X_arr.shape

        weights = np.zeros(n_features)
        bias = 0.0

        logger.info(
            f"Training logistic regression: n={n_samples}, features={n_features}, "
            f"lr={self.learning_rate}, iterations={self.iterations}"
        )

        for i in range(self.iterations):
            predictions = sigmoid(X_arr @ weights + bias)
            error = predictions - y_arr

            dw = X_arr.T @ error
            db = error.sum()

            weights -= self.learning_rate * dw / n_samples
            bias -= self.learning_rate * db / n_samples

            if logger.isEnabledFor(logging.DEBUG) and (i + 1) % LOG_EVERY == 0:
                loss = self._log_loss(y_arr, sigmoid(X_arr @ weights + bias))
                logger.debug(f"  iteration {i + 1}: log-loss={loss:.4f}")

        self._weights = weights
        self._bias = float(bias)
        return self

    def predict_probability(self, features: Sequence[float]) -> float:
        """Probability of readmission for one encoded patient."""
        x = self._validate_vector(features)
        return sigmoid(float(np.dot(self._weights, x)) + self._bias)

    def predict_label(self, features: Sequence[float]) -> int:
        """1 if the predicted probability is at least 0.5, else 0."""
        return 1 if self.predict_probability(features) >= DECISION_THRESHOLD else 0

    def predict_proba(self, X: ArrayLike) -> np.ndarray:
        """Vectorized predict_probability over the rows of X."""
        X_arr = self._validate_matrix(X)
        return sigmoid(X_arr @ self._weights + self._bias)

    def predict(self, X: ArrayLike) -> np.ndarray:
        """Vectorized predict_label over the rows of X."""
        return (self.predict_proba(X) >= DECISION_THRESHOLD).astype(int)

    def _check_fitted(self):
        if self._weights is None:
            raise ModelNotFittedError("Model must be fitted before use; call fit() first")

    def _validate_vector(self, features: Sequence[float]) -> np.ndarray:
        self._check_fitted()
        x = np.asarray(features, dtype=float)
        if x.ndim != 1 or x.shape[0] != len(self._weights):
            raise InvalidInputError(
                f"Expected a feature vector of length {len(self._weights)}, got shape {x.shape}"
            )
        return x

    def _validate_matrix(self, X: ArrayLike) -> np.ndarray:
        self._check_fitted()
        X_arr = _to_matrix(X)
        if X_arr.shape[1] != len(self._weights):
            raise InvalidInputError(
                f"Expected {len(self._weights)} features per row, got {X_arr.shape[1]}"
            )
        return X_arr

    @staticmethod
    def _validate_training_data(X: ArrayLike, y: Sequence[int]):
        n_rows = len(X)
        if n_rows == 0:
            raise InvalidInputError("Feature matrix must contain at least one sample")
        if len(y) != n_rows:
            raise InvalidInputError(
                f"Feature matrix has {n_rows} rows but {len(y)} labels were given"
            )

        X_arr = _to_matrix(X)
        y_arr = np.asarray(y, dtype=float)
        if y_arr.ndim != 1:
            raise InvalidInputError("Labels must be a one-dimensional sequence")
        if not np.all((y_arr == 0) | (y_arr == 1)):
            raise InvalidInputError("Labels must be binary (0/1)")

        return X_arr, y_arr

    @staticmethod
    def _log_loss(y: np.ndarray, p: np.ndarray) -> float:
        return float(-np.mean(y * np.log(p) + (1 - y) * np.log(1 - p)))

    def __repr__(self) -> str:
        state = "fitted" if self.is_fitted else "unfitted"
        return (
            f"LogisticRegressionModel(learning_rate={self.learning_rate}, "
            f"iterations={self.iterations}, {state})"
        )


def _to_matrix(X: ArrayLike) -> np.ndarray:
    """Convert X to a 2-D float array, rejecting ragged or empty rows."""
    if isinstance(X, np.ndarray):
        data = X
    else:
        data = [list(row) for row in X]
        widths = {len(row) for row in data}
        if len(widths) > 1:
            raise InvalidInputError(f"Feature matrix is ragged: row widths {sorted(widths)}")

    try:
        X_arr = np.asarray(data, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Feature matrix is not numeric: {e}") from e

    if X_arr.ndim != 2:
        raise InvalidInputError(f"Feature matrix must be 2-dimensional, got shape {X_arr.shape}")
    if X_arr.shape[1] == 0:
        raise InvalidInputError("Feature matrix rows must contain at least one feature")
    return X_arr
