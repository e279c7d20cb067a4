"""
Validation and conversion functions for attr.
"""
import logging

import attr
from attr.validators import in_

__all__ = ['in_', 'range_', 'clamp_', 'InvalidAdjustment']

logger = logging.getLogger(__name__)


class InvalidAdjustment(ValueError):
    """Raised when an adjustment value is not a number at all."""


@attr.s(repr=False, slots=True, hash=True)
class _RangeValidator(object):
    minimum = attr.ib()
    maximum = attr.ib()

    def __call__(self, inst, attr, value):
        try:
            range_options = self.minimum <= value and value <= self.maximum
        except TypeError:
            range_options = False

        if not range_options:
            raise ValueError(
                "'{name}' must be in range [{minimum!r}, {maximum!r}]".format(
                    name=attr.name, minimum=self.minimum, maximum=self.maximum
                )
            )

    def __repr__(self):
        return "<range_ validator with [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


def range_(minimum, maximum):
    """
    A validator that raises a :exc:`ValueError` if the initializer is called
    with a value that does not belong in the [minimum, maximum] range. The
    check is performed using ``minimum <= value and value <= maximum``
    """
    return _RangeValidator(minimum, maximum)


@attr.s(repr=False, slots=True, hash=True)
class _ClampConverter(object):
    minimum = attr.ib()
    maximum = attr.ib()

    def __call__(self, value):
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise InvalidAdjustment("Not a number: %r" % (value,))
        if number != number:
            raise InvalidAdjustment("Not a number: %r" % (value,))
        clamped = min(max(number, self.minimum), self.maximum)
        if clamped != number:
            logger.debug(
                "Clamped %g to [%g, %g]" % (number, self.minimum, self.maximum)
            )
        return clamped

    def __repr__(self):
        return "<clamp_ converter with [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


def clamp_(minimum, maximum):
    """
    A converter that coerces the value to float and clamps it into the
    [minimum, maximum] range. Out-of-range input is never rejected; only
    values that are not numbers raise :exc:`InvalidAdjustment`.
    """
    return _ClampConverter(minimum, maximum)
