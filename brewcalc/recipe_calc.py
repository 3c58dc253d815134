from collections import namedtuple
from . import brew_day, hop_composition, malt_composition, water_composition
from . import yeast_composition, yeast_starter
from .config import read_recipe_args, write_output
from .hop_composition import ibu_total
from .malt_composition import (mcu_from_grain_bill, og_from_points, points_from_grain_bill,
                               srm_morey_from_mcu, srm_to_display_color, total_grain_mass_kg)
from .water_composition import (EquipmentParams, predict_mash_ph, split_salts, treated_waters,
                                water_volumes)
from .yeast_composition import abv_calc, estimate_final_gravity
from .yeast_starter import cells_available, required_cells, starter_plan


Recipe = namedtuple('Recipe',
                    ['grain_bill', 'batch_volume_l', 'efficiency', 'hops',
                     'mash_steps', 'fermentation_steps', 'base_attenuation',
                     'abv_model', 'equipment', 'brew_method', 'yeast_type',
                     'packs', 'days_since_manufacture', 'pitch_rate',
                     'starter_steps', 'source_water', 'salts', 'slurry_l',
                     'slurry_billion_per_ml', 'mash_salts', 'sparge_salts',
                     'lactic_acid_ml'],
                    defaults=(0.72, (), (), (), 0.75, 'simple', EquipmentParams(),
                              water_composition.THREE_VESSEL, 'liquid', 1, None,
                              0.75, (), None, None, 0., 0., None, None, 0.))
Recipe.__doc__ = """Everything needed to derive a recipe's numbers.

Only grain_bill and batch_volume_l are required. slurry_l and
slurry_billion_per_ml describe harvested yeast when yeast_type is
'slurry'. source_water and the salts are optional; without a source
water there is no treated water profile and the mash pH assumes
distilled water. salts are shared between mash and sparge water by
volume, unless mash_salts or sparge_salts are given.
"""

RecipeResult = namedtuple('RecipeResult',
                          ['original_gravity', 'final_gravity', 'abv', 'srm',
                           'color', 'ibu', 'water', 'starter', 'water_profile',
                           'mash_ph'])


def calculate(recipe):
    """Derive all of a recipe's numbers.

    The steps run in dependency order: the grain bill gives the
    original gravity and color; the original gravity and process give
    the final gravity and ABV; the hops and original gravity give the
    bitterness; the grain, equipment and hops give the water volumes;
    the original gravity, volume and yeast give the starter; and the
    water volumes, salts and grain give the water profile and mash pH.

    Parameters
    ----------
     recipe : Recipe

    Returns
    -------
     result : RecipeResult

    """
    points = points_from_grain_bill(recipe.grain_bill, recipe.batch_volume_l,
                                    recipe.efficiency)
    og = og_from_points(points)
    srm = srm_morey_from_mcu(mcu_from_grain_bill(recipe.grain_bill, recipe.batch_volume_l))

    fg = estimate_final_gravity(og, recipe.base_attenuation, recipe.mash_steps,
                                recipe.fermentation_steps)
    abv = abv_calc(og, fg, recipe.abv_model)

    ibu = ibu_total(recipe.hops, recipe.batch_volume_l, og)

    water = water_volumes(total_grain_mass_kg(recipe.grain_bill), recipe.batch_volume_l,
                          recipe.equipment, recipe.brew_method, recipe.hops)

    available = cells_available(recipe.yeast_type, recipe.packs,
                                recipe.days_since_manufacture, recipe.slurry_l,
                                recipe.slurry_billion_per_ml)
    starter = starter_plan(required_cells(recipe.batch_volume_l, og, recipe.pitch_rate),
                           available, recipe.starter_steps)

    profile = None
    mash_profile = None
    if recipe.source_water is not None:
        if recipe.mash_salts is not None or recipe.sparge_salts is not None:
            mash_salts, sparge_salts = recipe.mash_salts, recipe.sparge_salts
        else:
            mash_salts, sparge_salts = split_salts(recipe.salts, water.mash_water_l,
                                                   water.sparge_water_l)
        mash_profile, _, profile = treated_waters(recipe.source_water, mash_salts,
                                                  sparge_salts, water.mash_water_l,
                                                  water.sparge_water_l)

    mash_ph = predict_mash_ph(recipe.grain_bill, mash_profile, water.mash_water_l,
                              recipe.lactic_acid_ml)

    return RecipeResult(og, fg, abv, srm, srm_to_display_color(srm), ibu, water,
                        starter, profile, mash_ph)


def main():
    """Entry point for recipe_calc command line script.

    """
    config, recipe_config = read_recipe_args()
    execute(config, recipe_config)


def execute(config, recipe_config):
    """Run every calculator over a recipe, in dependency order.

    malt_composition, yeast_composition, hop_composition and
    water_composition always run. yeast_starter runs if the recipe has
    a 'Starter', and brew_day if it has 'Brew Day' measurements. See
    each module for the parameters it reads and the fields it
    appends.

    """
    output = config.pop('Output', None)

    steps = [malt_composition, yeast_composition, hop_composition, water_composition]
    if 'Starter' in recipe_config:
        steps.append(yeast_starter)
    if 'Brew Day' in recipe_config:
        steps.append(brew_day)

    for step in steps:
        config, recipe_config = step.execute(config, recipe_config)

    if output is not None:
        config['Output'] = output
    write_output(config, recipe_config)
    return config, recipe_config


if __name__ == '__main__':
    main()
