import json
import sys
from unittest.mock import patch
import pytest
from .context import brewcalc as bc


def test_abv_calc():
    """Tests calculating ABV.

    """
    og = 1.050
    fg = 1.010
    abv = 5.25
    abv_not_simple = 5.339411100495098
    assert bc.abv_calc(og, fg) == pytest.approx(abv)
    assert bc.abv_calc(og, fg, 'alternative') == pytest.approx(abv_not_simple)
    assert bc.abv_simple(og, fg) == pytest.approx(abv)
    assert bc.abv_alternative(og, fg) == pytest.approx(abv_not_simple)


def test_abv_identities():
    for og in [1.000, 1.040, 1.080, 1.120]:
        assert bc.abv_calc(og, og) == 0.
        assert bc.abv_calc(og, og, 'alternative') == 0.

    drops = [0.01, 0.02, 0.04, 0.06]
    abvs = [bc.abv_calc(1.070, 1.070 - d) for d in drops]
    assert all(a < b for a, b in zip(abvs, abvs[1:]))
    assert bc.abv_calc(1.010, 1.020) < 0


def test_abv_auto():
    """Tests choosing the ABV formula by gravity drop.

    """
    assert bc.abv_calc(1.050, 1.010, 'auto') == pytest.approx(bc.abv_simple(1.050, 1.010))
    assert bc.abv_calc(1.100, 1.020, 'auto') == pytest.approx(bc.abv_alternative(1.100, 1.020))


def test_abv_calc_unknown_model():
    """Tests that an unknown ABV model falls back on the simple equation.

    """
    assert bc.abv_calc(1.050, 1.010, 'Simple') == pytest.approx(5.25)
    assert bc.abv_calc(1.050, 1.010, None) == pytest.approx(5.25)


def test_abv_robust():
    assert bc.abv_simple(float('nan'), 1.010) == 0.
    assert bc.abv_simple(1.050, float('inf')) == 0.
    assert bc.abv_alternative(None, 1.010) == 0.
    assert bc.abv_alternative(1.775, 1.010) == 0.


def test_attenuation():
    """Tests calculating attenuation.

    """
    og = 1.050
    fg = 1.010
    atten = 0.8
    assert bc.attenuation(og, fg) == pytest.approx(atten)
    assert bc.attenuation(1.0, 1.0) == 0.


def test_final_gravity():
    """Tests calculating final gravity.

    """
    og = 1.050
    attenuation = 0.8
    fg = 1.010
    assert bc.predict_final_gravity(og, attenuation) == pytest.approx(fg)


def test_fermentation_metrics():
    assert bc.fermentation_metrics([]) == (20., 14.)
    assert bc.fermentation_metrics(None) == (20., 14.)

    steps = [
        bc.FermentationStep('primary', 18., 7.),
        bc.FermentationStep('cold-crash', 2., 14.),
    ]
    temperature, days = bc.fermentation_metrics(steps)
    assert temperature == pytest.approx((18. * 7 + 2. * 14) / 21.)
    assert days == pytest.approx(21.)


def test_effective_attenuation_defaults():
    """Tests the estimator with no process information.

    With no fermentation days, fermentation is assumed to take 14 days
    at 20 degC.

    """
    assert bc.effective_attenuation() == pytest.approx(0.758)
    assert bc.effective_attenuation(None) == pytest.approx(0.758)
    assert bc.effective_attenuation(float('nan')) == pytest.approx(0.758)


def test_effective_attenuation_mash():
    """Tests the mash adjustments.

    """
    ferment = [bc.FermentationStep('primary', 20., 10.)]

    single = [bc.MashStep('infusion', 66., 60.)]
    assert bc.effective_attenuation(0.75, single, ferment) == pytest.approx(0.75)

    low = [bc.MashStep('infusion', 62., 60.)]
    assert bc.effective_attenuation(0.75, low, ferment) == pytest.approx(0.774)

    decoction = [bc.MashStep('decoction', 66., 60., 0.3)]
    assert bc.effective_attenuation(0.75, decoction, ferment) == pytest.approx(0.755)

    long_mash = [bc.MashStep('infusion', 66., 120.)]
    assert bc.effective_attenuation(0.75, long_mash, ferment) == pytest.approx(0.77)

    very_long_mash = [bc.MashStep('infusion', 66., 300.)]
    assert bc.effective_attenuation(0.75, very_long_mash, ferment) == pytest.approx(0.78)

    missing_temperature = [bc.MashStep('infusion', None, 60.)]
    assert bc.effective_attenuation(0.75, missing_temperature, ferment) == pytest.approx(0.75)


def test_effective_attenuation_fermentation():
    warm = [bc.FermentationStep('primary', 25., 10.)]
    assert bc.effective_attenuation(0.75, None, warm) == pytest.approx(0.77)

    long_ferment = [bc.FermentationStep('primary', 20., 20.)]
    assert bc.effective_attenuation(0.75, None, long_ferment) == pytest.approx(0.77)


def test_final_gravity_clamp():
    """Tests that the effective attenuation never exceeds 95%.

    """
    mash = [bc.MashStep('infusion', 40., 60.)]
    ferment = [bc.FermentationStep('primary', 30., 30.)]
    assert bc.effective_attenuation(0.95, mash, ferment) == pytest.approx(0.95)
    assert bc.estimate_final_gravity(1.060, 0.95, mash, ferment) == pytest.approx(1.003)

    cold = [bc.FermentationStep('primary', 5., 10.)]
    assert bc.effective_attenuation(0.3, None, cold) == pytest.approx(0.6)


def test_estimate_final_gravity():
    ferment = [bc.FermentationStep('primary', 20., 10.)]
    assert bc.estimate_final_gravity(1.050, 0.75, None, ferment) == pytest.approx(1.0125)

    mash = [bc.MashStep('infusion', 64., 75.)]
    att = bc.effective_attenuation(0.78, mash, ferment)
    fg = bc.estimate_final_gravity(1.060, 0.78, mash, ferment)
    assert fg == pytest.approx(bc.predict_final_gravity(1.060, att))


def test_nutrition():
    """Tests calories and carbohydrates per 12 oz.

    """
    calories, carbs = bc.nutrition(1.050, 1.010)
    assert calories == pytest.approx(163.7, abs=0.5)
    assert carbs == pytest.approx(15.19, abs=0.05)
    assert bc.nutrition(1.000, 1.000) == (0., 0.)


def test_base_attenuation():
    recipe_config = {'Yeast': [{'attenuation': 0.7}, {'attenuation': 0.8}]}
    assert bc.yeast_composition.base_attenuation({}, recipe_config) == 0.8
    assert bc.yeast_composition.base_attenuation({'Yeast Attenuation': 0.72}, {}) == 0.72
    assert bc.yeast_composition.base_attenuation({}, {}) == 0.75


def test_execute():
    """Functional test

    """
    config = {}
    recipe_config = {
        'Original Gravity': 1.050,
        'Yeast': [{'name': 'US-05', 'attenuation': 0.75}],
        'Mash': {'steps': [{'type': 'infusion', 'temperature': 66., 'duration': 60.}]},
        'Fermentation': [{'stage': 'primary', 'temperature': 20., 'days': 10.}]
    }

    _, res = bc.yeast_composition.execute(config, recipe_config)
    assert res['Final Gravity'] == pytest.approx(1.0125)
    assert res['Alcohol by Volume'] == pytest.approx(0.0375 * 131.25)
    assert res['Calories'] > 0


def test_execute_brew_day_gravity():
    """Tests that the measured original gravity takes precedence.

    """
    recipe_config = {
        'Original Gravity': 1.050,
        'Brew Day': {'Original Gravity': 1.060},
        'Fermentation': [{'stage': 'primary', 'temperature': 20., 'days': 10.}]
    }
    _, res = bc.yeast_composition.execute({}, recipe_config)
    assert res['Final Gravity'] == pytest.approx(1.015)


def test_execute_errors():
    with pytest.raises(ValueError):
        bc.yeast_composition.execute({}, {})

    recipe_config = {
        'Original Gravity': 1.050,
        'Fermentation': [{'stage': 'fermenting', 'temperature': 20., 'days': 10.}]
    }
    with pytest.raises(ValueError):
        bc.yeast_composition.execute({}, recipe_config)

    recipe_config = {'Original Gravity': 1.050, 'ABV Model': 'Simple'}
    with pytest.raises(ValueError, match='alternative, auto, simple'):
        bc.yeast_composition.execute({}, recipe_config)


def test_abvcalc_cli():
    testargs = ['abvcalc', '1.050', '1.010']
    with patch.object(sys, 'argv', testargs):
        res = bc.yeast_composition.abvcalc_main()
        assert res == pytest.approx(5.25)

    testargs = ['abvcalc', '1.050', '1.010', '--model', 'alternative']
    with patch.object(sys, 'argv', testargs):
        res = bc.yeast_composition.abvcalc_main()
        assert res == pytest.approx(5.339411100495098)


def test_cli(tmp_path):
    recipe = tmp_path / 'recipe.json'
    output = tmp_path / 'output.json'
    recipe.write_text(json.dumps({'Original Gravity': 1.050}))

    testargs = ['yeast_composition', str(recipe), '-o', str(output)]
    with patch.object(sys, 'argv', testargs):
        bc.yeast_composition.main()

    res = json.loads(output.read_text())
    assert res['Final Gravity'] == pytest.approx(1.0121)
