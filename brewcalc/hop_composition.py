import math
from collections import namedtuple
from .config import get_unit_parser, lookup, quantity, read_recipe_args, write_output
from .malt_composition import original_gravity
from .units import as_float


BOIL = 'boil'
FIRST_WORT_HOPPING = 'first wort'
WHIRLPOOL = 'whirlpool'
DRY_HOP = 'dry hop'
MASH_HOPPING = 'mash'

# Additions that sit in the kettle and soak up wort
KETTLE_ADDITIONS = (BOIL, FIRST_WORT_HOPPING, WHIRLPOOL)

HopAddition = namedtuple('HopAddition',
                         ['mass_g', 'alpha_acid', 'addition_type',
                          'boil_time_min', 'whirlpool_time_min',
                          'whirlpool_temp_c'],
                         defaults=(BOIL, 0., 15., 80.))


def bigness_factor(wort_gravity):
    """Wort 'bigness factor' for hop utilization.

    Parameters
    ----------
     wort_gravity : float
        Specific gravity of wort during boil.

    Returns
    -------
     bigness_factor : float
        Multiplicative factor for hop utilization based on wort
        gravity. Zero if the gravity is not a positive number.

    """
    wort_gravity = as_float(wort_gravity)
    if wort_gravity <= 0:
        return 0.
    return 1.65 * (0.000125 ** (wort_gravity - 1))


def boil_time_factor(boil_time_minutes):
    """Boil time factor for hop utilization.

    Parameters
    ----------
     boil_time_minutes : float
        Amount of time hops spend in the boil, in minutes.

    Returns
    -------
     boil_time_factor : float
        Multiplicative factor for hop utilization based on boil
        time. Zero for negative or non-finite times.

    """
    boil_time_minutes = as_float(boil_time_minutes, -1.)
    if boil_time_minutes < 0:
        return 0.
    return (1 - math.exp(-0.04 * boil_time_minutes)) / 4.15


def hop_utilization(boil_time_minutes, wort_gravity):
    """Tinseth hop utilization for a timed boil addition."""
    return bigness_factor(wort_gravity) * boil_time_factor(boil_time_minutes)


def whirlpool_temperature_factor(temperature_c):
    """Fraction of boil utilization achieved in a whirlpool.

    Isomerization is negligible at or below 60 degC and reaches boil
    rates at 100 degC; in between it follows a power curve.

    Parameters
    ----------
     temperature_c : float
        Whirlpool temperature, in degrees Celsius.

    Returns
    -------
     factor : float
        Between 0 and 1.

    """
    temperature_c = as_float(temperature_c, 0.)
    if temperature_c <= 60:
        return 0.
    clamped = max(60., min(100., temperature_c))
    return ((clamped - 60.) / 40.) ** 1.8


def addition_utilization(addition, wort_gravity):
    """Hop utilization for an addition, by addition type.

    Parameters
    ----------
     addition : HopAddition
        The hop addition. Boil and first wort additions use
        boil_time_min; whirlpool additions use whirlpool_time_min and
        whirlpool_temp_c.
     wort_gravity : float
        Specific gravity of the wort.

    Returns
    -------
     utilization : float
        Hop utilization. First wort hopping gets a 10% bonus over a
        regular addition of the same boil time. Dry hops and mash hops
        are credited with 5% and 15%, respectively, of a 60-minute
        boil addition. Unknown addition types get no utilization.

    """
    addition_type = getattr(addition, 'addition_type', None)
    if addition_type == BOIL:
        return hop_utilization(addition.boil_time_min, wort_gravity)
    elif addition_type == FIRST_WORT_HOPPING:
        return 1.1 * hop_utilization(addition.boil_time_min, wort_gravity)
    elif addition_type == WHIRLPOOL:
        tf = whirlpool_temperature_factor(getattr(addition, 'whirlpool_temp_c', None))
        time = getattr(addition, 'whirlpool_time_min', None)
        return hop_utilization(time, wort_gravity) * tf
    elif addition_type == DRY_HOP:
        return 0.05 * hop_utilization(60., wort_gravity)
    elif addition_type == MASH_HOPPING:
        return 0.15 * hop_utilization(60., wort_gravity)
    else:
        return 0.


def ibu_single_addition(addition, volume_l, wort_gravity):
    """IBU Contribution

    Parameters
    ----------
     addition : HopAddition
        The hop addition; mass_g in grams and alpha_acid as a
        fraction, e.g. 0.045 for a 4.5% AA hop.
     volume_l : float
        Wort volume, in liters.
     wort_gravity : float
        Specific gravity of the wort.

    Returns
    -------
     ibus : float
        IBU contribution of this addition, i.e. milligrams of
        isomerized alpha acids per liter. Zero if the volume, mass or
        alpha acids are not positive numbers, or if addition is not a
        HopAddition.

    """
    if not isinstance(addition, HopAddition):
        return 0.
    volume_l = as_float(volume_l)
    mass = as_float(addition.mass_g)
    alpha_acids = as_float(addition.alpha_acid)
    if volume_l <= 0 or mass <= 0 or alpha_acids <= 0:
        return 0.

    utilization = addition_utilization(addition, wort_gravity)
    return mass * alpha_acids * 1000. * utilization / volume_l


def ibu_total(additions, volume_l, wort_gravity):
    """Total IBUs of a hop schedule.

    None counts as no hops; anything in the schedule that is not a
    HopAddition contributes nothing.

    """
    return sum(ibu_single_addition(addition, volume_l, wort_gravity)
               for addition in additions or [])


def kettle_hop_mass_kg(additions):
    """Mass of hops added to the kettle (boil, first wort, whirlpool)."""
    return sum(max(0., as_float(addition.mass_g)) / 1000.
               for addition in additions or []
               if isinstance(addition, HopAddition)
               and addition.addition_type in KETTLE_ADDITIONS)


def parse_hop(up, hop):
    """HopAddition from a recipe 'Hops' entry.

    Parameters
    ----------
     up : unit_parser
        Used for quantities given as strings.
     hop : dict
        Recipe entry. See execute.

    Returns
    -------
     addition : HopAddition

    """
    if 'mass' in hop:
        mass = quantity(up, hop['mass'], 'grams')
    else:
        msg = 'Mass not specified for {0:s}; exiting.'
        raise ValueError(msg.format(hop.get('name', '')))

    addition_type = hop.get('addition type', BOIL)
    if 'boil_time' in hop:
        boil_time = quantity(up, hop['boil_time'], 'minutes')
    elif addition_type in (BOIL, FIRST_WORT_HOPPING):
        msg = 'Boil time not specified for {0:s}; exiting.'
        raise ValueError(msg.format(hop.get('name', '')))
    else:
        boil_time = 0.

    if 'whirlpool time' in hop:
        whirlpool_time = quantity(up, hop['whirlpool time'], 'minutes')
    else:
        whirlpool_time = 15.

    return HopAddition(mass, hop.get('alpha acids', 0.) / 100., addition_type,
                       boil_time, whirlpool_time,
                       hop.get('whirlpool temperature', 80.))


def main():
    """Entry point for hop_composition command line script.

    """
    config, recipe_config = read_recipe_args()
    execute(config, recipe_config)


def execute(config, recipe_config):
    """Calculations relevent to hop characteristics.

    Note: required parameters are in either config or
    recipe_config. Where applicable, if a parameter is specified in
    both config and recipe_config, the latter overrides the former.

    Parameters
    ----------
     'Original Gravity' : float
        Specific gravity of the wort, e.g. from malt_composition. A
        gravity measured under 'Brew Day' takes precedence.
     'Batch Volume' : float or string
        Final volume of wort, in liters or as a string like '5
        gallons'. Defaults to 20 liters.
     'Hops' : array_like
        Array of hop additions. Each addition is specified by a
        collection of key-value pairs as described below.

    Hop Parameters
    --------------
     'addition type' : string
        One of 'boil' (the default), 'first wort', 'whirlpool', 'dry
        hop' or 'mash'.
     'boil_time' : float or string
        How long the hop is boiled, in minutes or as a string like '1
        hour'. Required for 'boil' and 'first wort' additions.
     'whirlpool time' : float or string
        Whirlpool contact time, defaults to 15 minutes.
     'whirlpool temperature' : float
        Whirlpool temperature in degrees Celsius, defaults to 80.
     'mass' : float or string
        Mass of the addition, in grams or as a string like '1 oz'.
     'alpha acids' : float
        Alpha acid content of hop, as a percentage, e.g. '4.5' to
        represent 4.5%. Additions without alpha acids contribute no
        IBUs.

    Returns
    -------
     config, recipe_config, with the fields below appended to the
     latter. If requested, recipe_config is also saved to file.

    Fields Appended to recipe_config
    --------------------------------
     'IBUs' : float
        Estimated bitterness level of beer.

    """
    up = get_unit_parser(config)
    og = original_gravity(recipe_config)
    batch_volume = lookup(config, recipe_config, 'Batch Volume', 20., 'liters')

    additions = [parse_hop(up, hop) for hop in recipe_config.get('Hops', [])]
    for hop, addition in zip(recipe_config.get('Hops', []), additions):
        ibus = ibu_single_addition(addition, batch_volume, og)
        if addition.addition_type in (BOIL, FIRST_WORT_HOPPING):
            msg = '{name:s} ({kind:s}, {time:.0f} minutes): {ibu:0.1f} IBUs'
            print(msg.format(name=hop.get('name', ''), kind=addition.addition_type,
                             time=addition.boil_time_min, ibu=ibus))
        else:
            msg = '{name:s} ({kind:s}): {ibu:0.1f} IBUs'
            print(msg.format(name=hop.get('name', ''), kind=addition.addition_type,
                             ibu=ibus))

    recipe_config['IBUs'] = ibu_total(additions, batch_volume, og)
    print('Total IBUs: {0:.1f}'.format(recipe_config['IBUs']))

    write_output(config, recipe_config)
    return config, recipe_config


if __name__ == '__main__':
    main()
