import math


GALLONS_PER_LITER = 0.264172
POUNDS_PER_KILOGRAM = 2.20462
GRAMS_PER_OUNCE = 28.3495
BAR_PER_PSI = 0.0689475729


def as_float(value, default=0.):
    """Coerce a value to a finite float.

    Parameters
    ----------
     value : object
        Anything float() understands: a number, a numeric string, or
        None.
     default : float
        Returned when value is None, cannot be parsed, or is NaN or
        infinite.

    Returns
    -------
     value : float
        A finite float.

    """
    if value is None:
        return default
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(value) or math.isinf(value):
        return default
    return value


def fahrenheit_to_celsius(degf, difference=False):
    if difference:
        return (5. / 9.) * degf
    else:
        return (5. / 9.) * (degf - 32.)


def celsius_to_fahrenheit(degc, difference=False):
    if difference:
        return (9. / 5.) * degc
    else:
        return (9. / 5.) * degc + 32


def liters_to_gallons(liters):
    return liters * GALLONS_PER_LITER


def gallons_to_liters(gallons):
    return gallons / GALLONS_PER_LITER


def kilograms_to_pounds(kilograms):
    return kilograms * POUNDS_PER_KILOGRAM


def pounds_to_kilograms(pounds):
    return pounds / POUNDS_PER_KILOGRAM


def grams_to_ounces(grams):
    return grams / GRAMS_PER_OUNCE


def ounces_to_grams(ounces):
    return ounces * GRAMS_PER_OUNCE


def psi_to_bar(psi):
    return psi * BAR_PER_PSI


def bar_to_psi(bar):
    return bar / BAR_PER_PSI
