import math
from collections import namedtuple
import numpy as np
from scipy import interpolate
from .config import get_unit_parser, lookup, quantity, read_recipe_args, write_output
from .units import as_float, kilograms_to_pounds, liters_to_gallons, pounds_to_kilograms


GRAIN = 'grain'
ADJUNCT = 'adjunct'
EXTRACT = 'extract'
SUGAR = 'sugar'
NON_MASHABLE = (EXTRACT, SUGAR)

SUCROSE_PPG = 46.

GrainBillItem = namedtuple('GrainBillItem',
                           ['weight_kg', 'color_lovibond', 'ppg', 'kind',
                            'name', 'distilled_ph'],
                           defaults=(0., 0., GRAIN, '', None))
GrainBillItem.__doc__ = """One grist component.

weight_kg is the mass in kilograms, color_lovibond the malt color,
ppg the potential extract in gravity points per pound per gallon, and
kind one of 'grain', 'adjunct', 'extract' or 'sugar'. The name and
distilled_ph (pH of a distilled water mash of the malt alone) are only
used to predict the mash pH.
"""

# Morey color chart, SRM to RGB
SRM_CHART = np.array([
    [1, 255, 230, 153],
    [2, 255, 216, 120],
    [3, 255, 202, 90],
    [4, 255, 191, 66],
    [5, 251, 177, 35],
    [6, 248, 166, 0],
    [7, 243, 156, 0],
    [8, 234, 143, 0],
    [9, 229, 133, 0],
    [10, 222, 124, 0],
    [12, 205, 104, 0],
    [14, 187, 85, 0],
    [16, 173, 71, 0],
    [18, 160, 58, 0],
    [20, 149, 48, 0],
    [24, 122, 25, 0],
    [28, 105, 13, 0],
    [32, 92, 6, 0],
    [36, 80, 2, 0],
    [40, 68, 0, 0],
])


def is_mashable(kind):
    """Whether a grist component is subject to mash efficiency.

    Extracts and sugars dissolve completely, so they always convert at
    100% regardless of the brewhouse efficiency.

    """
    return kind not in NON_MASHABLE


def total_grain_mass_kg(items):
    return sum(max(0., as_float(item.weight_kg))
               for item in items or [] if item is not None)


def gravity_points_to_specific_gravity(gravity_points, vol_gal):
    """Convert gravity points to specific gravity

    Parameters
    ----------
     gravity_points : float
        Gravity points.
     vol_gal : float
        Wort volume, in gallons.

    Returns
    -------
     sg : float
        Specific gravity.

    """
    return 1. + 0.001 * gravity_points / vol_gal


def specific_gravity_to_gravity_points(sg, vol_gal):
    """Convert specific gravity to gravity points

    Parameters
    ----------
     sg : float
        Specific gravity.
     vol_gal : float
        Wort volume, in gallons.

    Returns
    -------
     gravity_points : float
        Gravity points.

    """
    return 1000. * (sg - 1.) * vol_gal


def points_from_grain_bill(items, batch_volume_l, efficiency=0.72):
    """Gravity points per gallon contributed by a grain bill.

    Parameters
    ----------
     items : array_like of GrainBillItem
        The grist. None is treated as an empty grist.
     batch_volume_l : float
        Wort volume, in liters.
     efficiency : float
        Brewhouse efficiency, like 0.72. Only applied to mashable
        components.

    Returns
    -------
     points : float
        Gravity points per gallon, like 50 for a 1.050 wort. Zero if
        the volume is not a positive number.

    """
    vol_gal = liters_to_gallons(as_float(batch_volume_l))
    if vol_gal <= 0:
        return 0.

    efficiency = as_float(efficiency)
    gravity_points = 0.
    for item in items or []:
        if item is None:
            continue
        mass = kilograms_to_pounds(as_float(item.weight_kg))
        ppg = as_float(item.ppg)
        if is_mashable(item.kind):
            gravity_points += efficiency * ppg * mass
        else:
            gravity_points += ppg * mass

    return gravity_points / vol_gal


def og_from_points(points):
    return 1. + points / 1000.


def mcu_from_grain_bill(items, volume_l):
    """Malt color units: pounds times degrees Lovibond per gallon."""
    vol_gal = liters_to_gallons(as_float(volume_l))
    if vol_gal <= 0:
        return 0.

    mcu = 0.
    for item in items or []:
        if item is None:
            continue
        mcu += kilograms_to_pounds(as_float(item.weight_kg)) * as_float(item.color_lovibond)

    return mcu / vol_gal


def srm_morey_from_mcu(mcu):
    """Convert Malt Color Units to SRM with the Morey equation.

    Parameters
    ----------
     mcu : float
        Malt color units. Negative or non-finite values are treated
        as zero.

    Returns
    -------
     srm : float
        SRM.

    """
    return 1.4922 * max(0., as_float(mcu)) ** 0.6859


def _round_half_up(x):
    return int(math.floor(x + 0.5))


def srm_to_display_color(srm):
    """Approximate beer color as a hex string, like '#e2a83d'.

    Each channel decays exponentially with SRM at its own rate and is
    clamped to [0, 255].

    """
    srm = max(0., as_float(srm))
    channels = [255. * math.exp(-0.1 * srm),
                255. * math.exp(-0.07 * srm),
                255. * math.exp(-0.02 * srm)]
    channels = [_round_half_up(max(0., min(255., c))) for c in channels]
    return '#{0:02x}{1:02x}{2:02x}'.format(*channels)


def srm_to_rgb(srm):
    """Beer color from the Morey color chart.

    Parameters
    ----------
     srm : float
        SRM. Values outside of the chart (1 to 40) are clamped.

    Returns
    -------
     rgb : tuple
        Red, green and blue channels, integers between 0 and 255,
        linearly interpolated between the neighboring chart entries.

    """
    srm = max(1., min(40., as_float(srm, 1.)))
    chart = interpolate.interp1d(SRM_CHART[:, 0], SRM_CHART[:, 1:], axis=0)
    return tuple(_round_half_up(c) for c in chart(srm))


def sg_to_plato(sg):
    """Convert specific gravity to degrees Plato.

    Uses the ASBC cubic fit, accurate over the range of worts and
    beers (1.000 to 1.150).

    Parameters
    ----------
     sg : float
        Specific gravity, like 1.053

    Returns
    -------
     deg_plato : float
        Degrees Plato, like 13.1

    """
    return -616.868 + 1111.14 * sg - 630.272 * sg ** 2 + 135.997 * sg ** 3


def percentages_from_weights(items):
    """Share of the grist, in percent, of each component."""
    items = list(items or [])
    total = total_grain_mass_kg(items)
    if total <= 0:
        return [0.] * len(items)
    return [100. * max(0., as_float(item.weight_kg)) / total for item in items]


def weights_from_percentages(items, percentages, target_abv, batch_volume_l,
                             efficiency=0.72, attenuation=0.75):
    """Scale a grist to hit a target ABV.

    Given the share of each component in the grist, find the absolute
    masses yielding the original gravity that, at the given
    attenuation, ferments out to the target ABV.

    Parameters
    ----------
     items : array_like of GrainBillItem
        The grist. Only ppg and kind are used.
     percentages : array_like
        Share of each component, in percent. Missing entries count as
        zero.
     target_abv : float
        Target alcohol by volume, in percent, like 5.5.
     batch_volume_l : float
        Wort volume, in liters.
     efficiency : float
        Brewhouse efficiency, clamped to [0, 1].
     attenuation : float
        Expected apparent attenuation, clamped to [0.4, 0.98].

    Returns
    -------
     items : list of GrainBillItem
        The grist with new masses. If the inputs cannot produce a grist
        (no volume, no efficiency, no extract) the items are returned
        unchanged.

    """
    items = list(items or [])
    percentages = list(percentages or [])
    efficiency = max(0., min(1., as_float(efficiency)))
    attenuation = max(0.4, min(0.98, as_float(attenuation, 0.75)))
    vol_gal = max(0., liters_to_gallons(as_float(batch_volume_l)))
    if vol_gal <= 0 or efficiency <= 0:
        return items

    og = 1. + max(0., as_float(target_abv)) / (131.25 * attenuation)
    gravity_points = specific_gravity_to_gravity_points(og, vol_gal)

    shares = []
    points_per_pound = 0.
    for i, item in enumerate(items):
        share = 0.
        if i < len(percentages):
            share = max(0., as_float(percentages[i])) / 100.
        shares.append(share)
        if is_mashable(item.kind):
            points_per_pound += share * as_float(item.ppg) * efficiency
        else:
            points_per_pound += share * as_float(item.ppg)

    if points_per_pound <= 0:
        return items

    total_kg = pounds_to_kilograms(gravity_points / points_per_pound)
    return [item._replace(weight_kg=total_kg * share)
            for item, share in zip(items, shares)]


def parse_malt(up, malt, sucrose_ppg=SUCROSE_PPG):
    """GrainBillItem from a recipe 'Malt' entry.

    Parameters
    ----------
     up : unit_parser
        Used for masses given as strings, like '10 pounds'.
     malt : dict
        Recipe entry. See execute.
     sucrose_ppg : float
        Gravity points per pound per gallon of pure sucrose, used to
        translate an 'extract potential'.

    Returns
    -------
     item : GrainBillItem

    """
    if 'mass' in malt:
        mass = quantity(up, malt['mass'], 'kilograms')
    else:
        mass = 0.

    if 'ppg' in malt:
        ppg = malt['ppg']
    elif 'extract potential' in malt:
        ppg = malt['extract potential'] * sucrose_ppg
    else:
        ppg = 0.

    return GrainBillItem(mass, malt.get('degrees lovibond', 0.), ppg,
                         malt.get('type', GRAIN), malt.get('name', ''),
                         malt.get('distilled pH'))


def original_gravity(recipe_config):
    """Original gravity to base downstream numbers on.

    A gravity measured on brew day takes precedence over the one
    predicted by malt_composition.

    """
    if 'Brew Day' in recipe_config and 'Original Gravity' in recipe_config['Brew Day']:
        return recipe_config['Brew Day']['Original Gravity']
    elif 'Original Gravity' in recipe_config:
        return recipe_config['Original Gravity']
    else:
        msg = 'Original Gravity not specified.'
        msg += ' Try running malt_composition first.'
        raise ValueError(msg)


def main():
    """Entry point for malt_composition script.

    """
    config, recipe_config = read_recipe_args()
    execute(config, recipe_config)


def execute(config, recipe_config):
    """Calculations relevant to malt characteristics.

    Note: required parameters are in either config or
    recipe_config. Where applicable, if a parameter is specified in
    both config and recipe_config, the latter overrides the former.

    Parameters
    ----------
     'Brewhouse Efficiency' : float
        Efficiency of sugar extraction process. Defaults to 72% if
        missing from both recipe_config and config.
     'Batch Volume' : float or str
        Final volume of wort in which yeast will be pitched, in liters
        or as a string like '5 gallons'. Defaults to 20 liters.
     'Malt' : array_like
        Array of grist components (not necessarily malted). Each
        component is specified by a collection of key-value pairs
        describing its mass, sugar content, and color. See below.
     'Target ABV' : float
        Optional. If present, the mass of each grist component is
        recomputed from its 'percent' so that the recipe hits this
        ABV (in percent) at the expected attenuation.

    Malt Parameters
    ---------------
     'mass' : float or string
        Mass of the grain, in kilograms or as a string like '5
        pounds'.
     'ppg' : float
        Gravity points per pound per gallon. For example, if ppg = 30,
        assuming 100% brewhouse efficiency, adding one pound of grain
        to one gallon of water would yield a specific gravity of 1.030.
     'extract potential' : float
        Gravity points, as expressed relative to pure sucrose. Sucrose
        has 46 ppg, so an extract potential of 0.8 has 0.8 * 46 = 37
        ppg. If both ppg and extract potential are specified for a
        malt, ppg is used.
     'degrees lovibond' : float
        Degrees Lovibond of malt.
     'type' : string
        One of 'grain' (the default), 'adjunct', 'extract' or
        'sugar'. Extracts and sugars are not subject to the brewhouse
        efficiency.
     'percent' : float
        Share of the grist, only used with 'Target ABV'.
     'distilled pH' : float
        Optional. pH of a distilled water mash of this malt, used by
        water_composition instead of an estimate from the name and
        color.

    Returns
    -------
     config, recipe_config, with the fields below appended to the
     latter. If requested, recipe_config is also saved to file.

    Fields Appended to recipe_config
    --------------------------------
     'Grain Mass' : float
        Total grist mass, in kilograms.
     'Original Gravity' : float
        Predicted specific gravity of wort before pitching yeast.
     'SRM' : float
        Predicted SRM (color) of wort.
     'Color' : string
        Hex color approximating the SRM.
     'Color RGB' : list
        Red, green and blue channels from the Morey color chart.

    """
    up = get_unit_parser(config)
    efficiency = lookup(config, recipe_config, 'Brewhouse Efficiency', 0.72)
    batch_volume = lookup(config, recipe_config, 'Batch Volume', 20., 'liters')

    if 'Malt' not in recipe_config:
        raise ValueError('Malt not specified.')

    grain_bill = [parse_malt(up, malt) for malt in recipe_config['Malt']]

    if 'Target ABV' in recipe_config:
        from .yeast_composition import base_attenuation
        percentages = [malt.get('percent', 0.) for malt in recipe_config['Malt']]
        grain_bill = weights_from_percentages(
            grain_bill, percentages, recipe_config['Target ABV'], batch_volume,
            efficiency, base_attenuation(config, recipe_config))

        for malt, item in zip(recipe_config['Malt'], grain_bill):
            malt['mass'] = item.weight_kg
            msg = '{0:s}: {1:.3f} kg'
            print(msg.format(malt.get('name', ''), item.weight_kg))

    og = og_from_points(points_from_grain_bill(grain_bill, batch_volume, efficiency))
    srm = srm_morey_from_mcu(mcu_from_grain_bill(grain_bill, batch_volume))

    recipe_config['Grain Mass'] = total_grain_mass_kg(grain_bill)
    recipe_config['Original Gravity'] = og
    recipe_config['SRM'] = srm
    recipe_config['Color'] = srm_to_display_color(srm)
    recipe_config['Color RGB'] = list(srm_to_rgb(srm))

    print('Original Gravity: {0:.03f}'.format(og))
    print('SRM: {0:.0f}'.format(srm))

    write_output(config, recipe_config)
    return config, recipe_config


if __name__ == '__main__':
    main()
