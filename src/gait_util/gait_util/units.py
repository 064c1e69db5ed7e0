"""Define the unit registry used for physical configuration values."""

import pint

UREG = pint.UnitRegistry()
Q_ = UREG.Quantity
