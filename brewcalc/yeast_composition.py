from collections import namedtuple
from .config import lookup, quantity, get_unit_parser, read_recipe_args, write_output
from .malt_composition import original_gravity, sg_to_plato
from .units import as_float


INFUSION = 'infusion'
DECOCTION = 'decoction'
RAMP = 'ramp'
MASH_STEP_TYPES = (INFUSION, DECOCTION, RAMP)

# Fermentation stages, in the order they happen
FERMENTATION_STAGES = (
    'primary',
    'secondary',
    'diacetyl-rest',
    'conditioning',
    'cold-crash',
    'lagering',
    'keg-conditioning',
    'bottle-conditioning',
    'spunding',
)

DEFAULT_ATTENUATION = 0.75

MashStep = namedtuple('MashStep',
                      ['step_type', 'temperature_c', 'duration_min',
                       'decoction_fraction'],
                      defaults=(INFUSION, 66., 60., 0.))

FermentationStep = namedtuple('FermentationStep',
                              ['stage', 'temperature_c', 'duration_days',
                               'pressure_psi'],
                              defaults=('primary', 20., 0., None))


def abvcalc_main():
    """Entry point for abvcalc command line script.

    """
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument('og', type=float, help='Original Gravity')
    parser.add_argument('fg', type=float, help='Final Gravity')
    parser.add_argument('-m', '--model', type=str, default='simple',
                        choices=sorted(ABV_MODELS), help='ABV formula')

    args = parser.parse_args()
    abv = abv_calc(args.og, args.fg, args.model)
    att = 100.0 * attenuation(args.og, args.fg)
    print('{0:.02f}% ABV'.format(abv))
    print('{0:.0f}% Attenuation'.format(att))
    return abv


def abv_simple(og, fg):
    """Computes ABV from OG and FG with the linear equation.

    Parameters
    ----------
    og : float
        Original gravity, like 1.053
    fg : float
        Final gravity, like 1.004

    Returns
    -------
    abv : float
        Alcohol by volume, in percent, like 6.4. Negative if fg
        exceeds og; zero for non-finite gravities.

    """
    og = as_float(og, None)
    fg = as_float(fg, None)
    if og is None or fg is None:
        return 0.
    return (og - fg) * 131.25


def abv_alternative(og, fg):
    """Computes ABV from OG and FG via alcohol by weight.

    This nonlinear equation is more accurate than abv_simple for big
    beers, where the gravity drop exceeds 0.05 or so.

    Parameters
    ----------
    og : float
        Original gravity, like 1.053
    fg : float
        Final gravity, like 1.004

    Returns
    -------
    abv : float
        Alcohol by volume, in percent, like 6.6.

    """
    og = as_float(og, None)
    fg = as_float(fg, None)
    if og is None or fg is None or og == 1.775:
        return 0.
    return (76.08 * (og - fg) / (1.775 - og)) * (fg / 0.794)


def abv_auto(og, fg):
    """Simple formula for small gravity drops, alternative otherwise."""
    if as_float(og) < as_float(fg) + 0.05:
        return abv_simple(og, fg)
    else:
        return abv_alternative(og, fg)


ABV_MODELS = {
    'simple': abv_simple,
    'alternative': abv_alternative,
    'auto': abv_auto,
}


def abv_calc(og, fg, model='simple'):
    """Computes ABV from OG and FG.

    Parameters
    ----------
    og : float
        Original gravity, like 1.053
    fg : float
        Final gravity, like 1.004
    model : string
        One of 'simple' (the default), 'alternative' or 'auto'. The
        simple equation is generally appropriate provided the
        difference in original and final gravities is less than
        0.05; 'auto' decides based on that rule.

    Returns
    -------
    abv : float
        Alcohol by volume, in percent, like 6.4. Unknown models fall
        back on the simple equation.

    """
    return ABV_MODELS.get(model, abv_simple)(og, fg)


def attenuation(og, fg):
    """Apparent attenuation

    Parameters
    ----------
    og : float
        Original gravity, like 1.053
    fg : float
        Final gravity, like 1.004

    Returns
    -------
    attenuation : float
       Attenuation, like 0.92. Zero when og is not above 1.

    """
    og = as_float(og)
    fg = as_float(fg)
    if og <= 1.:
        return 0.
    return (og - fg) / (og - 1.0)


def predict_final_gravity(og, attenuation):
    """Final gravity

    Parameters
    ----------
    og : float
        Original gravity, like 1.053
    attenuation : float
       Attenuation, like 0.92.

    Returns
    -------
    fg : float
        Final gravity, like 1.004

    """
    return og - attenuation * (og - 1.)


def fermentation_metrics(fermentation_steps):
    """Days-weighted mean temperature and total length of fermentation.

    Parameters
    ----------
     fermentation_steps : array_like of FermentationStep
        The fermentation schedule.

    Returns
    -------
     temperature_c : float
        Mean fermentation temperature, weighted by step duration. 20
        degC when no step has a duration.
     days : float
        Total fermentation time, in days. 14 days when no step has a
        duration.

    """
    total_days = 0.
    weighted_temp = 0.
    for step in fermentation_steps or []:
        days = max(0., as_float(step.duration_days))
        total_days += days
        weighted_temp += days * as_float(step.temperature_c, 20.)

    if total_days <= 0:
        return 20., 14.
    return weighted_temp / total_days, total_days


def effective_attenuation(base_attenuation=DEFAULT_ATTENUATION, mash_steps=None,
                          fermentation_steps=None):
    """Yeast attenuation adjusted for the mash and fermentation.

    This is an empirical regression, not a physical model. Relative
    to a 60-minute, 66 degC single infusion and a 10-day, 20 degC
    fermentation:

      - every degree below 66 degC, averaged over the mash time, adds
        0.6% attenuation (and every degree above removes it),
      - decoction steps add 0.5%, again averaged over the mash time,
      - every 15 minutes of extra mash time adds 0.5%, up to 3%,
      - every degree of fermentation temperature above 20 degC adds
        0.4%,
      - every day of fermentation beyond 10 days adds 0.2%.

    The result is clamped to [0.60, 0.95].

    Parameters
    ----------
     base_attenuation : float
        Advertised yeast attenuation, like 0.75. Defaults to 0.75 if
        None or not a number.
     mash_steps : array_like of MashStep
        The mash schedule.
     fermentation_steps : array_like of FermentationStep
        The fermentation schedule.

    Returns
    -------
     attenuation : float
        Effective apparent attenuation.

    """
    base_attenuation = as_float(base_attenuation, DEFAULT_ATTENUATION)

    mash_time = 0.
    temp_adj = 0.
    decoction_adj = 0.
    for step in mash_steps or []:
        t = max(0., as_float(step.duration_min))
        temperature = as_float(step.temperature_c) or 66.
        mash_time += t
        temp_adj += (66. - temperature) * 0.006 * t
        if step.step_type == DECOCTION:
            decoction_adj += 0.005 * t

    if mash_time > 0:
        temp_adj /= mash_time
        decoction_adj /= mash_time
    else:
        temp_adj = 0.
        decoction_adj = 0.
        mash_time = 60.

    mash_time_adj = max(-0.03, min(0.03, (mash_time - 60.) / 15. * 0.005))

    ferment_temp, ferment_days = fermentation_metrics(fermentation_steps)
    ferment_adj = (ferment_temp - 20.) * 0.004 + (ferment_days - 10.) * 0.002

    att = base_attenuation + temp_adj + decoction_adj + mash_time_adj + ferment_adj
    return max(0.6, min(0.95, att))


def estimate_final_gravity(og, base_attenuation=DEFAULT_ATTENUATION,
                           mash_steps=None, fermentation_steps=None):
    """Final gravity predicted from the recipe's process.

    Parameters
    ----------
     og : float
        Original gravity, like 1.053
     base_attenuation : float
        Advertised yeast attenuation, defaults to 0.75.
     mash_steps : array_like of MashStep
        The mash schedule.
     fermentation_steps : array_like of FermentationStep
        The fermentation schedule.

    Returns
    -------
     fg : float
        Final gravity, like 1.012. See effective_attenuation.

    """
    og = as_float(og, 1.)
    att = effective_attenuation(base_attenuation, mash_steps, fermentation_steps)
    return predict_final_gravity(og, att)


def nutrition(og, fg):
    """Calories and carbohydrates in a 355 mL (12 oz) serving.

    Parameters
    ----------
     og : float
        Original gravity, like 1.053
     fg : float
        Final gravity, like 1.012

    Returns
    -------
     calories : float
        Calories per serving, never negative.
     carbs : float
        Grams of carbohydrate per serving, never negative.

    Notes
    -----
     Follows "Brew By The Numbers" (Hall, Zymurgy 1995): original and
     apparent extract in degrees Plato give the real extract, and from
     there the alcohol by weight. Residual real extract is counted as
     carbohydrate.

    """
    og = as_float(og, 1.)
    fg = as_float(fg, 1.)
    oe = sg_to_plato(og)
    ae = sg_to_plato(fg)
    re = 0.1808 * oe + 0.8192 * ae
    abw = (oe - re) / (2.0665 - 0.010665 * oe)

    calories_per_liter = (6.9 * abw + 4.0 * (re - 0.1)) * fg * 10.
    carbs_per_liter = (re - 0.1) * fg * 10.
    serving = 0.355
    return max(0., calories_per_liter * serving), max(0., carbs_per_liter * serving)


def base_attenuation(config, recipe_config):
    """Advertised attenuation of the recipe's yeast.

    If multiple yeast strains are used, we assume the overall
    attenuation is determined by the yeast with the highest advertised
    attenuation.

    """
    att = 0.
    for yeast in recipe_config.get('Yeast', []):
        if 'attenuation' in yeast and yeast['attenuation'] > att:
            att = yeast['attenuation']
    if att > 0:
        return att
    return lookup(config, recipe_config, 'Yeast Attenuation', DEFAULT_ATTENUATION)


def parse_mash_steps(up, recipe_config):
    steps = []
    for step in recipe_config.get('Mash', {}).get('steps', []):
        if 'temperature' not in step or 'duration' not in step:
            raise ValueError('Must specify temperature and duration for each step.')
        if step.get('type', INFUSION) not in MASH_STEP_TYPES:
            raise ValueError('Unknown mash step type: {0:s}'.format(step['type']))
        steps.append(MashStep(step.get('type', INFUSION), step['temperature'],
                              quantity(up, step['duration'], 'minutes'),
                              step.get('decoction fraction', 0.)))
    return steps


def parse_fermentation_steps(recipe_config):
    steps = []
    for step in recipe_config.get('Fermentation', []):
        stage = step.get('stage', 'primary')
        if stage not in FERMENTATION_STAGES:
            raise ValueError('Unknown fermentation stage: {0:s}'.format(stage))
        steps.append(FermentationStep(stage, step.get('temperature', 20.),
                                      step.get('days', 0.), step.get('pressure')))
    return steps


def main():
    """Entry point for yeast_composition command line script.

    """
    config, recipe_config = read_recipe_args()
    execute(config, recipe_config)


def execute(config, recipe_config):
    """Calculations relevant to yeast characteristics.

    Note: required parameters are in either config or
    recipe_config. Where applicable, if a parameter is specified in
    both config and recipe_config, the latter overrides the former.

    Parameters
    ----------
     'Yeast' : array_like
        Array of one or more yeast packages. Each package is specified
        by a collection of key-value pairs; only 'attenuation' (like
        0.75) is used here. Defaults to 'Yeast Attenuation', or 75%.
     'Original Gravity' : float
        Specific gravity of wort before pitching yeast. This can
        either be a top-level parameter, representing the predicted
        original gravity from malt_composition, or the actual,
        measured value as recorded under 'Brew Day'. If both are
        present, the 'Brew Day' parameter takes precedence.
     'Mash' : dict
        Optional. Its 'steps' are an array of mash steps, each with
        'type' ('infusion', 'decoction' or 'ramp'), 'temperature' (in
        degC) and 'duration' (in minutes, or a string like '1 hour').
     'Fermentation' : array_like
        Optional. Fermentation steps, each with 'stage', 'temperature'
        (in degC) and 'days'.
     'ABV Model' : string
        One of 'simple', 'alternative' or 'auto'. Defaults to
        'simple'.

    Returns
    -------
     config, recipe_config, with the fields below appended to the
     latter. If requested, recipe_config is also saved to file.

    Fields Appended to recipe_config
    --------------------------------
     'Final Gravity' : float
        Predicted final gravity of beer.
     'Alcohol by Volume' : float
        Predicted final ABV of beer, in percent.
     'Calories' : float
        Calories per 355 mL serving.

    """
    up = get_unit_parser(config)
    og = original_gravity(recipe_config)

    model = lookup(config, recipe_config, 'ABV Model', 'simple')
    if model not in ABV_MODELS:
        msg = 'Unknown ABV model: {0}. Choose from {1:s}'
        raise ValueError(msg.format(model, ', '.join(sorted(ABV_MODELS))))

    fg = estimate_final_gravity(og, base_attenuation(config, recipe_config),
                                parse_mash_steps(up, recipe_config),
                                parse_fermentation_steps(recipe_config))
    abv = abv_calc(og, fg, model)
    calories, carbs = nutrition(og, fg)

    recipe_config['Final Gravity'] = fg
    recipe_config['Alcohol by Volume'] = abv
    recipe_config['Calories'] = calories
    print('Final Gravity: {0:.03f}'.format(fg))
    print('Alcohol by Volume: {0:.01f}%'.format(abv))
    print('Calories per 12 oz: {0:.0f} ({1:.1f} g carbohydrates)'.format(calories, carbs))

    write_output(config, recipe_config)
    return config, recipe_config


if __name__ == '__main__':
    main()
