"""Domain-restricted functions of one and two variables."""

from roadgeom.function.univariate import (
    ConstantFunction,
    LinearFunction,
    PolynomialFunction,
    ScaledFunction,
    UnivariateFunction,
)
from roadgeom.function.combination import (
    ConcatenatedFunction,
    SectionedUnivariateFunction,
    StackedFunction,
)
from roadgeom.function.bivariate import (
    BivariateFunction,
    PlaneFunction,
    SectionedBivariateFunction,
    ShapeFunction,
)

__all__ = [
    "UnivariateFunction",
    "ScaledFunction",
    "ConstantFunction",
    "LinearFunction",
    "PolynomialFunction",
    "ConcatenatedFunction",
    "StackedFunction",
    "SectionedUnivariateFunction",
    "BivariateFunction",
    "PlaneFunction",
    "ShapeFunction",
    "SectionedBivariateFunction",
]
