import json
import sys
from unittest.mock import patch
import pytest
from .context import brewcalc as bc


def simple_recipe(**kwargs):
    return bc.Recipe(grain_bill=[bc.GrainBillItem(2., 3., 36.)], batch_volume_l=20.,
                     hops=[bc.HopAddition(20., 0.10, 'boil', 60.)], **kwargs)


def test_calculate():
    """Tests deriving a whole recipe at once.

    """
    res = bc.calculate(simple_recipe())
    og = bc.og_from_points(bc.points_from_grain_bill([bc.GrainBillItem(2., 3., 36.)], 20.))
    assert res.original_gravity == pytest.approx(og)
    assert res.original_gravity == pytest.approx(1.02163, abs=1e-5)
    assert res.final_gravity == pytest.approx(bc.estimate_final_gravity(og))
    assert res.abv == pytest.approx(bc.abv_simple(og, res.final_gravity))
    assert res.ibu == pytest.approx(29.76, abs=0.05)
    assert res.color.startswith('#')
    assert res.water_profile is None


def test_calculate_fg_clamp():
    mash = [bc.MashStep('infusion', 40., 90.)]
    ferment = [bc.FermentationStep('primary', 28., 30.)]
    res = bc.calculate(simple_recipe(base_attenuation=0.9, mash_steps=mash,
                                     fermentation_steps=ferment))
    assert res.final_gravity == pytest.approx(1. + (res.original_gravity - 1.) * 0.05)


def test_calculate_water():
    """Tests that the hops and mash tun feed into the water volumes.

    """
    equipment = bc.EquipmentParams(mash_tun_capacity_l=5.)
    res = bc.calculate(simple_recipe(equipment=equipment))
    uncapped = bc.water_volumes(2., 20., bc.EquipmentParams(),
                                additions=[bc.HopAddition(20., 0.10, 'boil', 60.)])
    assert res.water.capacity_exceeded
    assert res.water.mash_water_l == pytest.approx(5.)
    assert res.water.total_water_l == pytest.approx(uncapped.total_water_l)
    assert res.water.pre_boil_l == pytest.approx((20. + 3. + 0.5 + 0.014) / 0.96)


def test_calculate_starter():
    steps = [bc.StarterStep(1., 1.036, 'braukaiser')]
    res = bc.calculate(simple_recipe(yeast_type='dry', starter_steps=steps))
    assert res.starter.cells_available == 66.
    assert res.starter.required_cells == pytest.approx(bc.required_cells(20., res.original_gravity))
    assert res.starter.final_cells > 66.


def test_calculate_water_profile():
    salts = bc.SaltAdditions(gypsum_g=2.)
    res = bc.calculate(simple_recipe(source_water=bc.zero_profile(), salts=salts))
    assert res.water_profile.Ca == pytest.approx(2. * 232.8 / res.water.total_water_l)


def test_calculate_slurry():
    res = bc.calculate(simple_recipe(yeast_type='slurry', slurry_l=0.2,
                                     slurry_billion_per_ml=1.))
    assert res.starter.cells_available == pytest.approx(200.)
    assert res.starter.final_cells == pytest.approx(200.)


def test_calculate_mash_and_sparge_salts():
    """Tests salts added to the mash and sparge water separately.

    """
    mash_salts = bc.SaltAdditions(gypsum_g=3.)
    res = bc.calculate(simple_recipe(source_water=bc.zero_profile(), mash_salts=mash_salts,
                                     salts=bc.SaltAdditions(gypsum_g=100.)))
    assert res.water_profile.Ca == pytest.approx(3. * 232.8 / res.water.total_water_l)

    mash_profile = bc.WaterProfile(Ca=3. * 232.8 / res.water.mash_water_l,
                                   SO4=3. * 558.3 / res.water.mash_water_l)
    expected = bc.predict_mash_ph(simple_recipe().grain_bill, mash_profile,
                                  res.water.mash_water_l)
    assert res.mash_ph == pytest.approx(expected)

    sparge_salts = bc.SaltAdditions(cacl2_g=2.)
    res = bc.calculate(simple_recipe(source_water=bc.zero_profile(),
                                     sparge_salts=sparge_salts))
    assert res.water_profile.Cl == pytest.approx(2. * 482.0 / res.water.total_water_l)
    assert res.mash_ph == pytest.approx(5.685)


def test_calculate_mash_ph():
    """Tests the mash pH with distilled water and with lactic acid.

    """
    res = bc.calculate(simple_recipe())
    assert res.mash_ph == pytest.approx(5.685)

    res = bc.calculate(simple_recipe(lactic_acid_ml=1.))
    assert res.mash_ph == pytest.approx(5.685 - 11.81 / 80.)

    res = bc.calculate(simple_recipe(source_water=bc.WaterProfile(HCO3=122.032)))
    assert res.mash_ph == pytest.approx(5.685 + 2. * res.water.mash_water_l / 80.)

    assert bc.calculate(bc.Recipe(grain_bill=[], batch_volume_l=20.)).mash_ph is None


def test_calculate_empty():
    """Tests that an empty recipe gives neutral numbers rather than
    errors.

    """
    res = bc.calculate(bc.Recipe(grain_bill=[], batch_volume_l=0.))
    assert res.original_gravity == 1.
    assert res.abv == 0.
    assert res.ibu == 0.
    assert res.starter.required_cells == 0.


def recipe_json():
    return {
        'Batch Volume': 20.,
        'Malt': [{'name': 'Pale Malt', 'mass': 4.5, 'ppg': 37, 'degrees lovibond': 2.}],
        'Hops': [{'name': 'Magnum', 'mass': 20., 'alpha acids': 12., 'boil_time': 60.}],
        'Yeast': [{'name': 'US-05', 'attenuation': 0.78}],
        'Fermentation': [{'stage': 'primary', 'temperature': 19., 'days': 14.}],
        'Source Water': 'RO',
        'Salts': {'gypsum': 4., 'cacl2': 2.},
        'Starter': {'yeast type': 'dry', 'packs': 1}
    }


def test_execute():
    """Functional test

    """
    _, res = bc.recipe_calc.execute(bc.load_config(), recipe_json())
    for key in ['Original Gravity', 'Final Gravity', 'Alcohol by Volume', 'IBUs',
                'Total Water', 'Pre-Boil Gravity', 'Water Profile Achieved',
                'Starter Result', 'Mash Water Profile', 'Mash pH', 'Color RGB']:
        assert key in res
    assert res['Final Gravity'] < res['Original Gravity']
    assert 5. < res['Mash pH'] < 6.


def test_cli(tmp_path):
    recipe = tmp_path / 'recipe.json'
    output = tmp_path / 'output.json'
    recipe.write_text(json.dumps(recipe_json()))

    testargs = ['recipe_calc', str(recipe), '-o', str(output)]
    with patch.object(sys, 'argv', testargs):
        bc.recipe_calc.main()

    res = json.loads(output.read_text())
    assert res['IBUs'] > 0
    assert res['Starter Result']['cells available'] == 66.
