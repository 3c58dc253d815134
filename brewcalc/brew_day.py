from .config import get_unit_parser, lookup, quantity, read_recipe_args, write_output
from .malt_composition import parse_malt, specific_gravity_to_gravity_points
from .units import as_float, kilograms_to_pounds, liters_to_gallons
from .yeast_composition import abv_calc


def potential_points(items):
    """Gravity points the grain bill could give at 100% efficiency.

    Parameters
    ----------
     items : array_like of GrainBillItem
        The grist.

    Returns
    -------
     points : float
        Sum of ppg times pounds, i.e. gravity points in one gallon.

    """
    return sum(as_float(item.ppg) * kilograms_to_pounds(as_float(item.weight_kg))
               for item in items or [] if item is not None)


def apparent_attenuation(og, fg):
    """Measured apparent attenuation, in percent, or None if og <= 1."""
    og = as_float(og)
    fg = as_float(fg)
    if og <= 1.:
        return None
    return 100. * (og - fg) / (og - 1.)


def _efficiency(items, gravity, volume_l):
    potential = potential_points(items)
    if potential <= 0:
        return None
    actual = specific_gravity_to_gravity_points(as_float(gravity, 1.),
                                                liters_to_gallons(as_float(volume_l)))
    return 100. * actual / potential


def mash_efficiency(items, pre_boil_gravity, pre_boil_volume_l):
    """Mash efficiency, in percent.

    The fraction of the grain bill's potential extract collected in
    the kettle before the boil.

    Parameters
    ----------
     items : array_like of GrainBillItem
        The grist as brewed.
     pre_boil_gravity : float
        Measured pre-boil specific gravity.
     pre_boil_volume_l : float
        Measured pre-boil volume, in liters.

    Returns
    -------
     efficiency : float or None
        None if the grist has no potential extract.

    """
    return _efficiency(items, pre_boil_gravity, pre_boil_volume_l)


def brewhouse_efficiency(items, og, volume_l):
    """Brewhouse efficiency, in percent.

    Like mash_efficiency, but measured on the wort going into the
    fermenter, so it includes every loss along the way.

    """
    return _efficiency(items, og, volume_l)


def evaporation_rate(pre_boil_volume_l, post_boil_volume_l, boil_time_hr):
    """Measured boil-off, in liters per hour, or None without a boil."""
    boil_time_hr = as_float(boil_time_hr)
    if boil_time_hr <= 0:
        return None
    return (as_float(pre_boil_volume_l) - as_float(post_boil_volume_l)) / boil_time_hr


def main():
    """Entry point for brew_day command line script.

    """
    config, recipe_config = read_recipe_args()
    execute(config, recipe_config)


def execute(config, recipe_config):
    """Compare brew day measurements with the recipe.

    Parameters
    ----------
     'Malt' : array_like
        The grist as brewed; see malt_composition.
     'Batch Volume' : float or string
        Planned volume into the fermenter, used if the measured volume
        is missing.
     'Boil Time' : float or string
        Length of the boil, in minutes.
     'Brew Day' : dict
        Measurements, any of which may be missing:
          'Pre-Boil Gravity', 'Pre-Boil Volume' (liters),
          'Post-Boil Volume' (liters), 'Original Gravity',
          'Fermenter Volume' (liters), 'Final Gravity'.

    Fields Appended to recipe_config['Brew Day']
    --------------------------------------------
     'Mash Efficiency', 'Brewhouse Efficiency' : float
        In percent.
     'Evaporation Rate' : float
        Liters per hour.
     'Alcohol by Volume', 'Apparent Attenuation' : float
        In percent.

    """
    if 'Brew Day' not in recipe_config:
        raise ValueError('Brew Day measurements not provided')

    up = get_unit_parser(config)
    brew_day = recipe_config['Brew Day']
    grain_bill = [parse_malt(up, malt) for malt in recipe_config.get('Malt', [])]

    if 'Pre-Boil Gravity' in brew_day and 'Pre-Boil Volume' in brew_day:
        pre_boil_volume = quantity(up, brew_day['Pre-Boil Volume'], 'liters')
        eff = mash_efficiency(grain_bill, brew_day['Pre-Boil Gravity'], pre_boil_volume)
        if eff is not None:
            brew_day['Mash Efficiency'] = eff
            print('Mash Efficiency: {0:.1f}%'.format(eff))

        if 'Post-Boil Volume' in brew_day:
            boil_time = lookup(config, recipe_config, 'Boil Time', 60., 'minutes')
            post_boil_volume = quantity(up, brew_day['Post-Boil Volume'], 'liters')
            rate = evaporation_rate(pre_boil_volume, post_boil_volume, boil_time / 60.)
            if rate is not None:
                brew_day['Evaporation Rate'] = rate
                print('Evaporation Rate: {0:.2f} liters per hour'.format(rate))

    if 'Original Gravity' in brew_day:
        og = brew_day['Original Gravity']
        if 'Fermenter Volume' in brew_day:
            volume = quantity(up, brew_day['Fermenter Volume'], 'liters')
        else:
            volume = lookup(config, recipe_config, 'Batch Volume', 20., 'liters')
        eff = brewhouse_efficiency(grain_bill, og, volume)
        if eff is not None:
            brew_day['Brewhouse Efficiency'] = eff
            print('Brewhouse Efficiency: {0:.1f}%'.format(eff))

        if 'Final Gravity' in brew_day:
            fg = brew_day['Final Gravity']
            brew_day['Alcohol by Volume'] = abv_calc(og, fg)
            print('Alcohol by Volume: {0:.1f}%'.format(brew_day['Alcohol by Volume']))
            att = apparent_attenuation(og, fg)
            if att is not None:
                brew_day['Apparent Attenuation'] = att
                print('Apparent Attenuation: {0:.0f}%'.format(att))

    write_output(config, recipe_config)
    return config, recipe_config


if __name__ == '__main__':
    main()
