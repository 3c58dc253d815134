import pytest
from .context import brewcalc as bc


def test_as_float():
    """Tests coercing values to finite floats.

    """
    assert bc.as_float('1.5') == 1.5
    assert bc.as_float(3) == 3.
    assert bc.as_float(None) == 0.
    assert bc.as_float('abc') == 0.
    assert bc.as_float(float('nan')) == 0.
    assert bc.as_float(float('inf'), 5.) == 5.
    assert bc.as_float(float('-inf'), None) is None


def test_temperature():
    assert bc.fahrenheit_to_celsius(212) == pytest.approx(100.)
    assert bc.celsius_to_fahrenheit(100) == pytest.approx(212.)
    assert bc.fahrenheit_to_celsius(9, difference=True) == pytest.approx(5.)
    assert bc.celsius_to_fahrenheit(5, difference=True) == pytest.approx(9.)


def test_volume():
    assert bc.liters_to_gallons(20.) == pytest.approx(5.28344)
    assert bc.gallons_to_liters(bc.liters_to_gallons(20.)) == pytest.approx(20.)


def test_mass():
    assert bc.kilograms_to_pounds(1.) == pytest.approx(2.20462)
    assert bc.pounds_to_kilograms(2.20462) == pytest.approx(1.)
    assert bc.ounces_to_grams(1.) == pytest.approx(28.3495)
    assert bc.grams_to_ounces(28.3495) == pytest.approx(1.)


def test_pressure():
    assert bc.psi_to_bar(1.) == pytest.approx(0.0689475729)
    assert bc.psi_to_bar(14.5) == pytest.approx(0.99974, abs=1e-5)
    assert bc.bar_to_psi(bc.psi_to_bar(12.)) == pytest.approx(12.)
