import pytest
from .context import brewcalc as bc


def test_gravity_points_to_specific_gravity():
    """Tests converting from gravity points to specific gravity.

    """
    gp = 100.
    vol = 5
    sg = 1.020
    assert bc.gravity_points_to_specific_gravity(gp, vol) == pytest.approx(sg)


def test_specific_gravity_to_gravity_points():
    """Tests converting from specific gravity to gravity points.

    """
    gp = 100.
    vol = 5
    sg = 1.020
    assert bc.specific_gravity_to_gravity_points(sg, vol) == pytest.approx(gp)


def test_points_from_grain_bill():
    """Tests gravity points from a single mashable grain.

    """
    items = [bc.GrainBillItem(2., 3., 36.)]
    expected = 0.72 * 36 * 2 * 2.20462 / (20 * 0.264172)
    points = bc.points_from_grain_bill(items, 20., 0.72)
    assert points == pytest.approx(expected)
    assert bc.og_from_points(points) == pytest.approx(1.02163, abs=1e-5)


def test_points_non_mashable():
    """Tests that sugars and extracts ignore the efficiency.

    """
    items = [bc.GrainBillItem(1., 0., 46., 'sugar')]
    expected = 46 * 2.20462 / (20 * 0.264172)
    assert bc.points_from_grain_bill(items, 20., 0.5) == pytest.approx(expected)
    assert bc.points_from_grain_bill(items, 20., 1.0) == pytest.approx(expected)


def test_points_invalid():
    """Tests gravity points with bad volumes and empty grists.

    """
    items = [bc.GrainBillItem(2., 3., 36.)]
    assert bc.points_from_grain_bill(items, 0.) == 0.
    assert bc.points_from_grain_bill(items, -5.) == 0.
    assert bc.points_from_grain_bill(items, float('nan')) == 0.
    assert bc.points_from_grain_bill(None, 20.) == 0.
    assert bc.points_from_grain_bill([None], 20.) == 0.


def test_mcu():
    items = [bc.GrainBillItem(1., 40.)]
    expected = 40 * 2.20462 / (20 * 0.264172)
    assert bc.mcu_from_grain_bill(items, 20.) == pytest.approx(expected)
    assert bc.mcu_from_grain_bill(items, 0.) == 0.


def test_srm():
    """Tests the Morey equation

    """
    assert bc.srm_morey_from_mcu(0.) == 0.
    assert bc.srm_morey_from_mcu(-5.) == 0.
    assert bc.srm_morey_from_mcu(10.) == pytest.approx(1.4922 * 10 ** 0.6859)


def test_srm_to_display_color():
    assert bc.srm_to_display_color(0.) == '#ffffff'
    assert bc.srm_to_display_color(-3.) == '#ffffff'
    assert bc.srm_to_display_color(10.) == '#5e7fd1'


def test_srm_to_rgb():
    """Tests interpolating the color chart.

    """
    assert bc.srm_to_rgb(1.) == (255, 230, 153)
    assert bc.srm_to_rgb(0.) == (255, 230, 153)
    assert bc.srm_to_rgb(11.) == (214, 114, 0)
    assert bc.srm_to_rgb(50.) == (68, 0, 0)


def test_sg_to_plato():
    assert bc.sg_to_plato(1.050) == pytest.approx(12.39, abs=0.01)
    assert bc.sg_to_plato(1.000) == pytest.approx(0., abs=0.01)


def test_percentages_from_weights():
    items = [bc.GrainBillItem(1.), bc.GrainBillItem(3.)]
    assert bc.percentages_from_weights(items) == pytest.approx([25., 75.])
    assert bc.percentages_from_weights([bc.GrainBillItem(0.)]) == [0.]


def test_weights_from_percentages():
    """Tests scaling a grist to a target ABV.

    """
    items = [bc.GrainBillItem(0., 2., 36.), bc.GrainBillItem(0., 60., 34.)]
    res = bc.weights_from_percentages(items, [80., 20.], 5.25, 20., 0.72, 0.75)

    og = bc.og_from_points(bc.points_from_grain_bill(res, 20., 0.72))
    assert og == pytest.approx(1. + 5.25 / (131.25 * 0.75))
    assert res[0].weight_kg == pytest.approx(4 * res[1].weight_kg)
    assert res[0].color_lovibond == 2.


def test_weights_from_percentages_invalid():
    items = [bc.GrainBillItem(1., 2., 36.)]
    assert bc.weights_from_percentages(items, [100.], 5., 0.) == items
    assert bc.weights_from_percentages(items, [100.], 5., 20., 0.) == items
    assert bc.weights_from_percentages(items, [0.], 5., 20.) == items


def test_execute():
    """Functional test

    """
    config = {}
    recipe_config = {
        'Brewhouse Efficiency': 0.72,
        'Batch Volume': 20.,
        'Malt': [
            {
                'name': 'Pale Malt',
                'mass': 2.,
                'ppg': 36,
                'degrees lovibond': 3.
            }
        ]
    }

    _, res = bc.malt_composition.execute(config, recipe_config)
    assert res['Grain Mass'] == pytest.approx(2.)
    assert res['Original Gravity'] == pytest.approx(1.02163, abs=1e-5)
    assert res['Color'].startswith('#')
    assert res['Color RGB'] == list(bc.srm_to_rgb(res['SRM']))
    assert res['Color RGB'][0] == 255


def test_original_gravity():
    """Tests that a measured original gravity beats the predicted one.

    """
    assert bc.original_gravity({'Original Gravity': 1.050}) == 1.050
    recipe_config = {'Original Gravity': 1.050, 'Brew Day': {'Original Gravity': 1.055}}
    assert bc.original_gravity(recipe_config) == 1.055
    recipe_config = {'Original Gravity': 1.050, 'Brew Day': {'Final Gravity': 1.010}}
    assert bc.original_gravity(recipe_config) == 1.050
    with pytest.raises(ValueError):
        bc.original_gravity({})


def test_execute_target_abv():
    """Functional test with a target ABV

    """
    config = {}
    recipe_config = {
        'Brewhouse Efficiency': 0.72,
        'Batch Volume': 20.,
        'Target ABV': 5.25,
        'Yeast': [{'attenuation': 0.75}],
        'Malt': [
            {'name': 'Pale Malt', 'ppg': 36, 'percent': 90.},
            {'name': 'Sugar', 'ppg': 46, 'type': 'sugar', 'percent': 10.}
        ]
    }

    _, res = bc.malt_composition.execute(config, recipe_config)
    assert res['Original Gravity'] == pytest.approx(1. + 5.25 / (131.25 * 0.75))
    assert res['Malt'][0]['mass'] == pytest.approx(9 * res['Malt'][1]['mass'])


def test_execute_missing_malt():
    with pytest.raises(ValueError):
        bc.malt_composition.execute({}, {'Batch Volume': 20.})
