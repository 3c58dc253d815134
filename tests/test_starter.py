import datetime
import pytest
from .context import brewcalc as bc


def test_required_cells():
    """Tests cells needed at the default ale pitch rate.

    """
    expected = 0.75 * 20. * bc.sg_to_plato(1.050)
    assert bc.required_cells(20., 1.050) == pytest.approx(expected)
    assert bc.required_cells(20., 1.050, 1.5) == pytest.approx(2 * expected)
    assert bc.required_cells(-5., 1.050) == 0.
    assert bc.required_cells(20., 0.990) == 0.


def test_viability():
    assert bc.viability(None) == 1.
    assert bc.viability(0) == 1.
    assert bc.viability(100) == pytest.approx(0.3)
    assert bc.viability(365) == 0.


def test_days_since():
    today = datetime.date(2024, 3, 31)
    assert bc.days_since('2024-03-01', today) == 30
    assert bc.days_since(datetime.date(2024, 3, 1), today) == 30
    assert bc.days_since('2024-04-15', today) == 0
    assert bc.days_since(None, today) is None
    assert bc.days_since('', today) is None

    morning = datetime.datetime(2024, 3, 1, 9, 30)
    assert bc.days_since(morning, today) == 30
    assert bc.days_since('2024-03-01', datetime.datetime(2024, 3, 31, 23, 59)) == 30
    assert bc.days_since('not a date', today) is None


def test_cells_available():
    """Tests cells in each kind of yeast.

    """
    assert bc.cells_available('dry') == 66.
    assert bc.cells_available('dry', 2.7) == 132.
    assert bc.cells_available('liquid') == 100.
    assert bc.cells_available('liquid', 1, 100) == pytest.approx(30.)
    assert bc.cells_available('liquid', 2, 200) == 0.
    assert bc.cells_available('liquid-200', 1) == 200.
    assert bc.cells_available('slurry', slurry_l=0.2, slurry_billion_per_ml=1.) == pytest.approx(200.)
    assert bc.cells_available('dry', -1) == 0.


def test_dme_grams_for_gravity():
    expected = 36 * 0.264172 / 45. * 453.59237
    assert bc.dme_grams_for_gravity(1., 1.036) == pytest.approx(expected)
    assert bc.dme_grams_for_gravity(1., 0.990) == 0.
    assert bc.dme_grams_for_gravity(2., 1.036) == pytest.approx(2 * expected)


def test_white_growth():
    """Tests the White growth curve.

    """
    factor = 12.54793776 * 100. ** -0.4594858324 - 0.9994994906
    assert bc.white_growth(100., 1., 'none') == pytest.approx(100. * (1 + factor))
    assert bc.white_growth(10., 2., 'shaking') > bc.white_growth(10., 2., 'none')
    assert bc.white_growth(0., 1.) == 0.
    assert bc.white_growth(100., 0.) == 0.
    assert bc.white_growth(100., -1.) == 0.
    assert bc.white_growth(100., -1., 'shaking') == 0.


def test_growth_saturation():
    """White growth is limited by the starter volume, Braukaiser growth
    is not.

    """
    liters = 0.5
    white = bc.white_growth(100., liters, 'shaking')
    braukaiser = bc.braukaiser_growth(100., liters, 1.036)
    assert white <= 200. * liters
    assert white == pytest.approx(100.)
    assert braukaiser > 200. * liters
    assert braukaiser != pytest.approx(white)


def test_braukaiser_growth():
    expected = 50. + 1.4 * bc.dme_grams_for_gravity(1., 1.040)
    assert bc.braukaiser_growth(50., 1., 1.040) == pytest.approx(expected)


def test_starter_plan():
    """Tests a two step starter.

    """
    required = bc.required_cells(20., 1.060)
    steps = [
        bc.StarterStep(1., 1.036, 'white', 'shaking'),
        bc.StarterStep(2., 1.036, 'braukaiser'),
    ]
    res = bc.starter_plan(required, 100., steps)

    first = bc.white_growth(100., 1., 'shaking')
    second = bc.braukaiser_growth(first, 2., 1.036)
    assert len(res.steps) == 2
    assert res.steps[0].end_cells == pytest.approx(first)
    assert res.steps[1].end_cells == pytest.approx(second)
    assert res.final_cells == pytest.approx(second)
    assert res.diff == pytest.approx(second - required)
    assert res.total_starter_l == pytest.approx(3.)
    assert res.total_dme_g == pytest.approx(bc.dme_grams_for_gravity(3., 1.036))


def test_starter_plan_no_steps():
    res = bc.starter_plan(150., 100., [])
    assert res.final_cells == 100.
    assert res.diff == -50.
    assert res.steps == []

    res = bc.starter_plan(150., 100., None)
    assert res.total_dme_g == 0.


def test_starter_plan_unknown_model():
    res = bc.starter_plan(150., 100., [bc.StarterStep(1., 1.036, 'guesswork')])
    assert res.final_cells == 100.
    assert res.steps[0].dme_grams > 0


def test_execute():
    """Functional test

    """
    config = {}
    recipe_config = {
        'Original Gravity': 1.050,
        'Batch Volume': 20.,
        'Pitch Rate': 0.75,
        'Starter': {
            'yeast type': 'dry',
            'packs': 2,
            'steps': [{'volume': 1., 'gravity': 1.036, 'model': 'braukaiser'}]
        }
    }

    _, res = bc.yeast_starter.execute(config, recipe_config)
    starter = res['Starter Result']
    assert starter['cells available'] == 132.
    assert starter['final cells'] == pytest.approx(132. + 1.4 * bc.dme_grams_for_gravity(1., 1.036))
    assert starter['difference'] == pytest.approx(starter['final cells'] - bc.required_cells(20., 1.050))


def test_execute_errors():
    with pytest.raises(ValueError):
        bc.yeast_starter.execute({}, {'Starter': {}})

    recipe_config = {'Original Gravity': 1.050, 'Starter': {'yeast type': 'frozen'}}
    with pytest.raises(ValueError):
        bc.yeast_starter.execute({}, recipe_config)
