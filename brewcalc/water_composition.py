# General references:
# http://www.brewersfriend.com/mash-chemistry-and-brewing-water-calculator/
# John Palmer and Colin Kaminski, Water: A Comprehensive Guide for Brewers
#
# Water volumes work backwards from the batch: what ends up in the
# fermenter plus everything lost on the way (evaporation, kettle and
# chiller deadspace, hops, cooling shrinkage) is the pre-boil volume;
# the mash and sparge water have to provide that plus whatever the
# grain soaks up.
from collections import namedtuple
import numpy as np
from .config import get_unit_parser, lookup, quantity, read_recipe_args, write_output
from .hop_composition import kettle_hop_mass_kg, parse_hop
from .malt_composition import (ADJUNCT, GRAIN, NON_MASHABLE, gravity_points_to_specific_gravity,
                               is_mashable, parse_malt, specific_gravity_to_gravity_points,
                               total_grain_mass_kg)
from .units import as_float, liters_to_gallons


THREE_VESSEL = 'three-vessel'
BIAB_SPARGE = 'biab-sparge'
BIAB_FULL = 'biab-full'
BREW_METHODS = (THREE_VESSEL, BIAB_SPARGE, BIAB_FULL)

ION_KEYS = ('Ca', 'Mg', 'Na', 'Cl', 'SO4', 'HCO3')
SALT_KEYS = ('gypsum_g', 'cacl2_g', 'epsom_g', 'nacl_g', 'nahco3_g')

# Volumes at or below this are treated as empty
MIN_VOLUME_L = 1e-4

EquipmentParams = namedtuple('EquipmentParams',
                             ['mash_thickness_l_per_kg',
                              'grain_absorption_l_per_kg',
                              'mash_tun_deadspace_l',
                              'mash_tun_capacity_l',
                              'boil_time_min',
                              'boil_off_rate_l_per_hr',
                              'cooling_shrinkage_pct',
                              'kettle_loss_l',
                              'chiller_loss_l',
                              'hop_absorption_l_per_kg'],
                             defaults=(3.0, 0.8, 0., None, 60., 3.0, 4.0, 0.5, 0., 0.7))

WaterVolumes = namedtuple('WaterVolumes',
                          ['pre_boil_l', 'mash_water_l', 'sparge_water_l',
                           'total_water_l', 'capacity_exceeded'])

WaterProfile = namedtuple('WaterProfile', ION_KEYS, defaults=(0.,) * 6)

SaltAdditions = namedtuple('SaltAdditions', SALT_KEYS, defaults=(0.,) * 5)

# ppm of each ion contributed by 1 gram of salt in 1 liter of water.
# Rows follow SALT_KEYS, columns follow ION_KEYS.
SALT_ION_YIELDS = np.array([
    # Ca     Mg    Na     Cl     SO4    HCO3
    [232.8, 0.,   0.,    0.,    558.3, 0.],     # gypsum, CaSO4.2H2O
    [272.6, 0.,   0.,    482.0, 0.,    0.],     # calcium chloride, CaCl2.2H2O
    [0.,    98.6, 0.,    0.,    389.6, 0.],     # Epsom salt, MgSO4.7H2O
    [0.,    0.,   393.4, 606.6, 0.,    0.],     # table salt, NaCl
    [0.,    0.,   273.7, 0.,    0.,    726.3],  # baking soda, NaHCO3
])

# Mash pH. References:
# AJ deLange, proton deficit (MBAA Technical Quarterly, 2013)
# http://braukaiser.com/wiki/index.php?title=Mash_pH_control
DEFAULT_MASH_PH = 5.4
MASH_PH_RANGE = (5.2, 5.6)
MASH_PH_BOUNDS = (3.0, 8.0)
PH_TOLERANCE = 0.02

# mEq per kg of malt per pH unit
MALT_BUFFERING = 40.
# mEq per mL of 88% lactic acid: 0.88 x 1.209 g/mL x 1000 / 90.08 g/mol
LACTIC_88_MEQ_PER_ML = 11.81
# mEq per g of NaHCO3: 1000 / 84.006 g/mol
NAHCO3_MEQ_PER_G = 11.904

# Distilled water mash pH range of each grain category
GRAIN_DI_PH = {
    'base': (5.65, 5.72),
    'wheat': (5.95, 6.05),
    'munich': (4.70, 5.55),
    'crystal': (4.50, 5.20),
    'roasted': (4.45, 4.60),
    'acidulated': (3.35, 3.45),
    'adjunct': (5.70, 5.80),
}
# Degrees Lovibond across which the pH falls through its range
COLOR_RAMPS = {
    'munich': (4., 200.),
    'crystal': (10., 120.),
    'roasted': (300., 500.),
}

ACIDULATED_WORDS = ('acidulated', 'acid malt', 'sauermalz')
ROASTED_WORDS = ('roasted', 'black malt', 'black patent', 'black barley', 'chocolate',
                 'carafa', 'midnight wheat', 'blackprinz', 'dehusked')
CRYSTAL_WORDS = ('crystal', 'caramel', 'special b', 'cara')
WHEAT_WORDS = ('wheat', 'weizen')
KILNED_WORDS = ('munich', 'vienna', 'biscuit', 'melanoidin', 'aromatic', 'amber',
                'brown', 'victory', 'special roast', 'honey malt', 'abbey',
                'brumalt', 'cookie', 'coffee malt', 'red x')
ADJUNCT_WORDS = ('flaked', 'torrified', 'rice', 'corn')

PhAdjustment = namedtuple('PhAdjustment',
                          ['target_ph', 'lactic_acid_ml', 'baking_soda_g'])


def effective_kettle_loss(equipment, additions=None):
    """Kettle losses, including wort absorbed by kettle hops.

    Parameters
    ----------
     equipment : EquipmentParams
        Brewing system.
     additions : array_like of HopAddition
        Hop schedule. Only boil, first wort and whirlpool additions
        absorb wort.

    Returns
    -------
     kettle_loss_l : float
        Wort left behind in the kettle, in liters.

    """
    kettle_loss = max(0., as_float(equipment.kettle_loss_l))
    absorption = max(0., as_float(equipment.hop_absorption_l_per_kg))
    return kettle_loss + absorption * kettle_hop_mass_kg(additions)


def pre_boil_volume(batch_volume_l, equipment, kettle_loss_l=None):
    """Volume of wort to collect for the boil.

    Parameters
    ----------
     batch_volume_l : float
        Volume of wort going into the fermenter, in liters.
     equipment : EquipmentParams
        Brewing system.
     kettle_loss_l : float
        Overrides equipment.kettle_loss_l, e.g. with the output of
        effective_kettle_loss.

    Returns
    -------
     pre_boil_l : float
        Pre-boil volume, in liters, measured hot.

    """
    if kettle_loss_l is None:
        kettle_loss_l = equipment.kettle_loss_l

    boil_off = (as_float(equipment.boil_off_rate_l_per_hr)
                * as_float(equipment.boil_time_min) / 60.)
    post_boil = (as_float(batch_volume_l) + boil_off + as_float(kettle_loss_l)
                 + as_float(equipment.chiller_loss_l))

    shrinkage = max(0., min(99., as_float(equipment.cooling_shrinkage_pct))) / 100.
    return post_boil / (1. - shrinkage)


def mash_water(grain_mass_kg, equipment):
    """Strike water: grain at the mash thickness, plus tun deadspace."""
    return (as_float(grain_mass_kg) * as_float(equipment.mash_thickness_l_per_kg)
            + as_float(equipment.mash_tun_deadspace_l))


def sparge_water(grain_mass_kg, pre_boil_l, equipment):
    """Sparge water needed to reach the pre-boil volume.

    Whatever the grain absorbs has to be made up, so the sparge is
    the pre-boil volume less the mash water, plus absorption. Never
    negative.

    """
    absorbed = as_float(grain_mass_kg) * as_float(equipment.grain_absorption_l_per_kg)
    return max(0., as_float(pre_boil_l) - mash_water(grain_mass_kg, equipment) + absorbed)


def sparge_from_mash_used(used_mash_l, desired_total_l):
    """Sparge water once the mash volume has been decided.

    Parameters
    ----------
     used_mash_l : float
        Mash water actually used, e.g. limited by the mash tun.
     desired_total_l : float
        Total water (mash plus sparge) the process needs.

    Returns
    -------
     sparge_l : float
        The remainder, never negative.

    """
    return max(0., as_float(desired_total_l) - as_float(used_mash_l))


def water_volumes(grain_mass_kg, batch_volume_l, equipment,
                  brew_method=THREE_VESSEL, additions=None):
    """Mash, sparge and total water for a brew.

    The ideal split is computed first, ignoring the mash tun. If the
    mash tun capacity is set and the mash water does not fit, the
    mash is limited to the capacity and the sparge takes up the rest,
    so the total water is unchanged.

    Parameters
    ----------
     grain_mass_kg : float
        Total grist mass, in kilograms.
     batch_volume_l : float
        Volume of wort going into the fermenter, in liters.
     equipment : EquipmentParams
        Brewing system.
     brew_method : string
        One of 'three-vessel' (the default), 'biab-sparge' or
        'biab-full'. A full-volume brew-in-a-bag mashes with all of the
        water and does not sparge. Any other method gets the ideal
        split with no capacity check.
     additions : array_like of HopAddition
        Hop schedule, for hop absorption in the kettle.

    Returns
    -------
     volumes : WaterVolumes
        Volumes in liters, and whether the mash tun capacity forced a
        change.

    """
    kettle_loss = effective_kettle_loss(equipment, additions)
    pre_boil = pre_boil_volume(batch_volume_l, equipment, kettle_loss)
    capacity = as_float(equipment.mash_tun_capacity_l)

    if brew_method == BIAB_FULL:
        mash = (pre_boil
                + as_float(grain_mass_kg) * as_float(equipment.grain_absorption_l_per_kg)
                + as_float(equipment.mash_tun_deadspace_l))
        sparge = 0.
    else:
        mash = mash_water(grain_mass_kg, equipment)
        sparge = sparge_water(grain_mass_kg, pre_boil, equipment)

    capacity_exceeded = False
    if brew_method in BREW_METHODS and capacity > 0 and mash > capacity:
        desired_total = mash + sparge
        mash = capacity
        sparge = sparge_from_mash_used(mash, desired_total)
        capacity_exceeded = True

    return WaterVolumes(pre_boil, mash, sparge, mash + sparge, capacity_exceeded)


def pre_boil_gravity(og, batch_volume_l, boil_volume_l):
    """Gravity of the wort at a larger volume.

    Boiling concentrates the wort without changing the amount of
    sugar, so the gravity points are conserved.

    Parameters
    ----------
     og : float
        Specific gravity at batch_volume_l, like 1.053
     batch_volume_l : float
        Volume at which the gravity is known.
     boil_volume_l : float
        Volume at which the gravity is wanted.

    Returns
    -------
     sg : float
        Specific gravity at boil_volume_l. If either volume is not
        positive, og is returned unchanged.

    """
    og = as_float(og, 1.)
    batch_volume_l = as_float(batch_volume_l)
    boil_volume_l = as_float(boil_volume_l)
    if batch_volume_l <= 0 or boil_volume_l <= 0:
        return og
    gp = specific_gravity_to_gravity_points(og, liters_to_gallons(batch_volume_l))
    return gravity_points_to_specific_gravity(gp, liters_to_gallons(boil_volume_l))


def strike_temperature(target_c, mash_thickness_l_per_kg, grain_temp_c=20.):
    """Strike water temperature for a single infusion.

    Parameters
    ----------
     target_c : float
        Desired mash temperature, in degC.
     mash_thickness_l_per_kg : float
        Water to grist ratio, in liters per kilogram.
     grain_temp_c : float
        Temperature of the grain, in degC.

    Returns
    -------
     strike_c : float
        Temperature of the water before mashing in, in degC.

    Notes
    -----
     0.41 is the specific heat of grain relative to water, in
     metric units (the familiar 0.2 is for quarts per pound).

    """
    target_c = as_float(target_c)
    thickness = as_float(mash_thickness_l_per_kg)
    if thickness <= 0:
        return target_c
    return (target_c - as_float(grain_temp_c)) * (0.41 / thickness) + target_c


def zero_profile():
    return WaterProfile(*([0.] * len(ION_KEYS)))


def profile_from_dict(ions):
    """WaterProfile from a dict like {'Ca': 50, 'SO4': 100}."""
    return WaterProfile(*[as_float(ions.get(key)) for key in ION_KEYS])


def add_profiles(a, b):
    return WaterProfile(*(np.array(a, dtype=float) + np.array(b, dtype=float)))


def scale_profile(profile, factor):
    return WaterProfile(*(np.array(profile, dtype=float) * as_float(factor)))


def clamp_profile(profile):
    """Replace negative or non-finite ion levels with zero."""
    return WaterProfile(*[max(0., as_float(ppm)) for ppm in profile])


def ion_delta(salts, volume_l):
    """Ions contributed by salt additions.

    Parameters
    ----------
     salts : SaltAdditions
        Grams of each salt. Negative or non-finite amounts count as
        zero, and None counts as no salts.
     volume_l : float
        Water volume the salts are dissolved in, in liters.

    Returns
    -------
     delta : WaterProfile
        Increase in each ion, in ppm.

    """
    if salts is None:
        salts = SaltAdditions()
    volume_l = max(MIN_VOLUME_L, as_float(volume_l))
    grams = np.array([max(0., as_float(g)) for g in salts])
    return WaterProfile(*(grams.dot(SALT_ION_YIELDS) / volume_l))


def treated_profile(source, salts, volume_l):
    """Source water after dissolving salts in volume_l liters of it."""
    if source is None:
        source = zero_profile()
    return clamp_profile(add_profiles(source, ion_delta(salts, volume_l)))


def split_salts(salts, mash_l, sparge_l):
    """Share salt additions between the mash and sparge water.

    Parameters
    ----------
     salts : SaltAdditions
        Grams of each salt for all of the brewing water.
     mash_l, sparge_l : float
        Mash and sparge water volumes, in liters.

    Returns
    -------
     mash_salts, sparge_salts : SaltAdditions
        Each gets a share of every salt in proportion to its volume,
        so both waters end up with the same ion levels. No salts at
        all if there is no water.

    """
    if salts is None:
        salts = SaltAdditions()
    mash_l = max(0., as_float(mash_l))
    sparge_l = max(0., as_float(sparge_l))
    total = mash_l + sparge_l
    if total <= MIN_VOLUME_L:
        return SaltAdditions(), SaltAdditions()

    grams = np.array([max(0., as_float(g)) for g in salts])
    return (SaltAdditions(*(grams * mash_l / total)),
            SaltAdditions(*(grams * sparge_l / total)))


def treated_waters(source, mash_salts, sparge_salts, mash_l, sparge_l):
    """Mash and sparge water, each with its own salts, and the blend.

    Parameters
    ----------
     source : WaterProfile
        Untreated water, used for both mash and sparge.
     mash_salts, sparge_salts : SaltAdditions
        Grams of each salt dissolved in the mash and sparge water.
     mash_l, sparge_l : float
        Mash and sparge water volumes, in liters.

    Returns
    -------
     mash, sparge, mixed : WaterProfile
        The treated mash water, the treated sparge water, and the two
        mixed in proportion to their volumes. Salts added to a water
        with no volume never reach the blend. With no water at all, the
        blend is the untreated source.

    """
    if source is None:
        source = zero_profile()
    mash = treated_profile(source, mash_salts, mash_l)
    sparge = treated_profile(source, sparge_salts, sparge_l)

    if max(0., as_float(mash_l)) + max(0., as_float(sparge_l)) <= MIN_VOLUME_L:
        return mash, sparge, clamp_profile(source)
    return mash, sparge, mix_profiles([(mash_l, mash), (sparge_l, sparge)])


def mix_profiles(portions):
    """Blend several waters.

    Parameters
    ----------
     portions : array_like
        Pairs of (volume in liters, WaterProfile). Negative or
        non-finite volumes count as zero.

    Returns
    -------
     profile : WaterProfile
        Volume-weighted average. The zero profile if the total volume
        is (essentially) zero.

    """
    volumes = []
    profiles = []
    for volume, profile in portions or []:
        volumes.append(max(0., as_float(volume)))
        profiles.append(np.array(clamp_profile(profile)))

    total = sum(volumes)
    if total <= MIN_VOLUME_L:
        return zero_profile()

    mixed = np.array(volumes).dot(np.array(profiles)) / total
    return WaterProfile(*mixed)


def chloride_to_sulfate_ratio(profile):
    """Chloride to sulfate ratio, or None if there is no sulfate."""
    sulfate = as_float(profile.SO4)
    if sulfate <= 0:
        return None
    return as_float(profile.Cl) / sulfate


def flavor_balance(ratio):
    """Describe a chloride to sulfate ratio."""
    if ratio is None:
        return 'very malty'
    elif ratio < 0.5:
        return 'very hoppy'
    elif ratio < 1.0:
        return 'hoppy'
    elif ratio < 2:
        return 'malty'
    else:
        return 'very malty'


def profile_difference(actual, target, tolerance=20.):
    """Compare a water profile against a target.

    Parameters
    ----------
     actual : WaterProfile
        Achieved water.
     target : WaterProfile
        Desired water.
     tolerance : float
        Acceptable difference, in ppm.

    Returns
    -------
     differences : dict
        For each ion, a pair (actual - target, band) where band is
        'ok' if the difference is within the tolerance, and 'over' or
        'under' otherwise.

    """
    tolerance = abs(as_float(tolerance, 20.))
    differences = {}
    for key in ION_KEYS:
        diff = as_float(getattr(actual, key)) - as_float(getattr(target, key))
        if diff > tolerance:
            band = 'over'
        elif diff < -tolerance:
            band = 'under'
        else:
            band = 'ok'
        differences[key] = (diff, band)
    return differences


def residual_alkalinity(profile):
    """Residual alkalinity, in ppm as CaCO3.

    Positive values raise the mash pH, negative values lower it.

    """
    alkalinity = as_float(profile.HCO3) * 50. / 61.016
    return alkalinity - as_float(profile.Ca) / 2.5 - as_float(profile.Mg) / 3.33


def effective_alkalinity(profile):
    """Alkalinity left once calcium and magnesium react with the malt.

    Parameters
    ----------
     profile : WaterProfile
        Mash water.

    Returns
    -------
     alkalinity : float
        In mEq/L. Bicarbonate counts fully; calcium and magnesium
        precipitate malt phosphates, neutralizing 1/3.5 and 1/7 of
        their equivalents, respectively (Kolbach).

    """
    return (as_float(profile.HCO3) / 61.016
            - as_float(profile.Ca) / (40.078 * 3.5)
            - as_float(profile.Mg) / (24.305 * 7.))


def _has_any(name, words):
    return any(word in name for word in words)


def classify_grain_for_ph(name, color_lovibond=0., kind=GRAIN):
    """Mash pH category of a grist component.

    Parameters
    ----------
     name : string
        Name of the malt, like 'Crystal 60'. Most of the
        classification relies on it.
     color_lovibond : float
        Malt color. Very dark malts are roasted; anything darker than
        10 degrees Lovibond that is not otherwise recognized is a
        kilned malt.
     kind : string
        Grist kind, as in GrainBillItem. Extracts and sugars are
        treated as adjuncts.

    Returns
    -------
     category : string
        One of the keys of GRAIN_DI_PH.

    """
    name = (name or '').lower()
    color = as_float(color_lovibond)

    if _has_any(name, ACIDULATED_WORDS):
        return 'acidulated'
    elif kind in NON_MASHABLE:
        return 'adjunct'
    elif _has_any(name, ROASTED_WORDS) or color >= 300:
        return 'roasted'
    elif _has_any(name, CRYSTAL_WORDS):
        return 'crystal'
    elif _has_any(name, WHEAT_WORDS):
        return 'wheat'
    elif _has_any(name, KILNED_WORDS):
        return 'munich'
    elif kind == ADJUNCT or _has_any(name, ADJUNCT_WORDS):
        return 'adjunct'
    elif color > 10:
        return 'munich'
    else:
        return 'base'


def grain_distilled_ph(category, color_lovibond=0.):
    """pH of a distilled water mash of a malt.

    Kilned, crystal and roasted malts get more acidic as they get
    darker: their pH falls linearly across COLOR_RAMPS from the top to
    the bottom of their range. Other categories get the middle of
    their range.

    """
    low, high = GRAIN_DI_PH.get(category, GRAIN_DI_PH['base'])
    if category in COLOR_RAMPS:
        return float(np.interp(as_float(color_lovibond), COLOR_RAMPS[category],
                               (high, low)))
    return 0.5 * (low + high)


def predict_mash_ph(grain_bill, mash_profile=None, mash_water_l=0.,
                    lactic_acid_ml=0., baking_soda_g=0.):
    """Estimates the pH of the mash.

    Parameters
    ----------
     grain_bill : array_like of GrainBillItem
        The grist. Only mashable components take part; each uses its
        distilled_ph if set, or an estimate from its name and color.
     mash_profile : WaterProfile
        Mash water after salt additions. None means distilled water.
     mash_water_l : float
        Mash water volume, in liters.
     lactic_acid_ml : float
        88% lactic acid added to the mash, in milliliters.
     baking_soda_g : float
        Baking soda added to the mash on top of mash_profile, in grams.

    Returns
    -------
     pH : float or None
        Room temperature mash pH, between 3 and 8. None if there is no
        mashable grain.

    Notes
    -----
     The mash pH balances protons: the water alkalinity, the acid and
     base additions, and the charge each malt picks up moving away from
     its distilled water pH must sum to zero. Every malt buffers the
     same MALT_BUFFERING mEq per kg per pH unit, which makes the
     balance linear in the pH, so it is solved directly: the mass
     weighted distilled water pH, shifted by the net alkalinity.

    """
    weights = []
    di_ph = []
    for item in grain_bill or []:
        if item is None or not is_mashable(item.kind):
            continue
        weight = max(0., as_float(item.weight_kg))
        if weight <= 0:
            continue
        ph = as_float(item.distilled_ph, None)
        if ph is None:
            category = classify_grain_for_ph(item.name, item.color_lovibond, item.kind)
            ph = grain_distilled_ph(category, item.color_lovibond)
        weights.append(weight)
        di_ph.append(ph)

    if not weights:
        return None
    weights = np.array(weights)
    total = weights.sum()

    alkalinity = 0.
    if mash_profile is not None:
        alkalinity = effective_alkalinity(mash_profile) * max(0., as_float(mash_water_l))
    alkalinity -= max(0., as_float(lactic_acid_ml)) * LACTIC_88_MEQ_PER_ML
    alkalinity += max(0., as_float(baking_soda_g)) * NAHCO3_MEQ_PER_G

    ph = weights.dot(np.array(di_ph)) / total + alkalinity / (MALT_BUFFERING * total)
    return float(max(MASH_PH_BOUNDS[0], min(MASH_PH_BOUNDS[1], ph)))


def ph_adjustment(current_ph, target_ph=DEFAULT_MASH_PH, grain_mass_kg=0.):
    """Acid or base needed to move the mash to a target pH.

    Parameters
    ----------
     current_ph : float
        Predicted mash pH, e.g. from predict_mash_ph.
     target_ph : float
        Desired mash pH, defaults to 5.4.
     grain_mass_kg : float
        Mass of mashable grain, in kilograms.

    Returns
    -------
     adjustment : PhAdjustment or None
        Milliliters of 88% lactic acid to lower the pH, or grams of
        baking soda to raise it, rounded to 0.1. None if the pH is
        unknown or already within 0.02 of the target.

    """
    current_ph = as_float(current_ph, None)
    target_ph = as_float(target_ph, DEFAULT_MASH_PH)
    if current_ph is None:
        return None
    delta = current_ph - target_ph
    if abs(delta) < PH_TOLERANCE:
        return None

    meq = max(0., as_float(grain_mass_kg)) * MALT_BUFFERING * abs(delta)
    if delta > 0:
        return PhAdjustment(target_ph, round(meq / LACTIC_88_MEQ_PER_ML, 1), 0.)
    else:
        return PhAdjustment(target_ph, 0., round(meq / NAHCO3_MEQ_PER_G, 1))


def named_profile(config, name, kind='profiles'):
    """A packaged water profile, by name.

    Parameters
    ----------
     config : dict
        Brewing configuration; profiles live under config['water'].
     name : string or dict
        Name of a packaged profile, like 'Burton', or the ion levels
        themselves.
     kind : string
        'profiles' for source waters, 'targets' for style targets.

    Returns
    -------
     profile : WaterProfile

    """
    if isinstance(name, dict):
        return profile_from_dict(name)

    known = config.get('water', {}).get(kind, {})
    if name not in known:
        msg = 'Unknown water profile: {0:s}. Choose from {1:s}'
        raise ValueError(msg.format(name, ', '.join(sorted(known))))
    return profile_from_dict(known[name])


def equipment_from_config(config, recipe_config):
    """EquipmentParams from the recipe, falling back on the config."""
    return EquipmentParams(
        mash_thickness_l_per_kg=lookup(config, recipe_config, 'Mash Thickness', 3.0),
        grain_absorption_l_per_kg=lookup(config, recipe_config, 'Grain Absorption', 0.8),
        mash_tun_deadspace_l=lookup(config, recipe_config, 'Mash Tun Deadspace', 0., 'liters'),
        mash_tun_capacity_l=lookup(config, recipe_config, 'Mash Tun Capacity', units='liters'),
        boil_time_min=lookup(config, recipe_config, 'Boil Time', 60., 'minutes'),
        boil_off_rate_l_per_hr=lookup(config, recipe_config, 'Evaporation Rate', 3.0),
        cooling_shrinkage_pct=lookup(config, recipe_config, 'Cooling Shrinkage', 4.0),
        kettle_loss_l=lookup(config, recipe_config, 'Kettle Loss', 0.5, 'liters'),
        chiller_loss_l=lookup(config, recipe_config, 'Chiller Loss', 0., 'liters'),
        hop_absorption_l_per_kg=lookup(config, recipe_config, 'Hop Absorption', 0.7))


def salts_from_config(recipe_config, key='Salts'):
    """SaltAdditions from a recipe entry like 'Salts', in grams."""
    salts = recipe_config.get(key) or {}
    return SaltAdditions(*[as_float(salts.get(salt.replace('_g', ''))) for salt in SALT_KEYS])


def main():
    """Entry point for water_composition command line script.

    """
    config, recipe_config = read_recipe_args()
    execute(config, recipe_config)


def execute(config, recipe_config):
    """Light wrapper for other functions.

    First we compute the water volumes required. If the recipe names a
    source water, we compute the treated water profile and compare it
    against the target profile, if any. Finally we estimate the mash
    pH.

    """
    config, recipe_config = water_volume(config, recipe_config)
    if 'Source Water' in recipe_config:
        config, recipe_config = water_chemistry(config, recipe_config)
    config, recipe_config = mash_ph(config, recipe_config)

    write_output(config, recipe_config)
    return config, recipe_config


def water_volume(config, recipe_config):
    """Determine water volumes required.

    Note: required parameters are in either config or
    recipe_config. Where applicable, if a parameter is specified in
    both config and recipe_config, the latter overrides the former.

    Parameters
    ----------
     'Batch Volume' : float or string
        Volume of wort going into the fermenter, in liters or as a
        string like '5 gallons'.
     'Brew Method' : string
        One of 'three-vessel', 'biab-sparge' or 'biab-full'.
     'Boil Time' : float or string
        Length of the boil, in minutes or as a string like '1 hour'.
     'Evaporation Rate' : float
        Boil-off, in liters per hour. Evaporation rate depends on
        ambient humidity, how windy it is, how strong the burner is,
        etc.
     'Mash Thickness', 'Grain Absorption' : float
        Liters per kilogram of grain.
     'Mash Tun Deadspace', 'Mash Tun Capacity', 'Kettle Loss',
     'Chiller Loss' : float or string
        Volumes, in liters or as strings with units. If no capacity
        is given, the mash tun is assumed big enough.
     'Cooling Shrinkage' : float
        Percent volume lost as the wort cools.
     'Hop Absorption' : float
        Liters of wort absorbed per kilogram of kettle hops.
     'Malt' : array_like
        Grist, as used in malt_composition. Only the masses are used
        here.
     'Hops' : array_like
        Hop schedule, as used in hop_composition. Only the masses and
        addition types are used here.
     'Original Gravity' : float
        Output from malt_composition.

    Fields Appended to recipe_config
    --------------------------------
     'Pre-Boil Volume', 'Average Boil Volume', 'Mash Water Volume',
     'Sparge Water Volume', 'Total Water' : float
        Volumes, in liters.
     'Mash Tun Capacity Exceeded' : bool
        Whether the mash water had to be limited to the mash tun.
     'Strike Temperature' : float
        Strike water temperature in degC, for the first mash step.
     'Pre-Boil Gravity' : float
        Predicted specific gravity of wort before the boil. This gives
        a comparison point for assessing the efficiency of the mash on
        brew day.
     'Average Gravity' : float
        Predicted specific gravity of wort half-way through the
        boil.

    """
    up = get_unit_parser(config)
    batch_volume = lookup(config, recipe_config, 'Batch Volume', 20., 'liters')
    brew_method = lookup(config, recipe_config, 'Brew Method', THREE_VESSEL)
    equipment = equipment_from_config(config, recipe_config)

    if 'Malt' not in recipe_config:
        raise ValueError('Malt not specified.')
    grain_mass = total_grain_mass_kg([parse_malt(up, malt) for malt in recipe_config['Malt']])
    additions = [parse_hop(up, hop) for hop in recipe_config.get('Hops', [])]

    volumes = water_volumes(grain_mass, batch_volume, equipment, brew_method, additions)
    post_boil = volumes.pre_boil_l - (as_float(equipment.boil_off_rate_l_per_hr)
                                      * as_float(equipment.boil_time_min) / 60.)
    average_boil_volume = 0.5 * (volumes.pre_boil_l + post_boil)

    recipe_config['Pre-Boil Volume'] = volumes.pre_boil_l
    recipe_config['Average Boil Volume'] = average_boil_volume
    recipe_config['Mash Water Volume'] = volumes.mash_water_l
    recipe_config['Sparge Water Volume'] = volumes.sparge_water_l
    recipe_config['Total Water'] = volumes.total_water_l
    recipe_config['Mash Tun Capacity Exceeded'] = volumes.capacity_exceeded

    print('Mash Water: {0:.1f} liters'.format(volumes.mash_water_l))
    print('Sparge Water: {0:.1f} liters'.format(volumes.sparge_water_l))
    print('Total Water: {0:.1f} liters'.format(volumes.total_water_l))
    if volumes.capacity_exceeded:
        msg = 'Mash tun capacity exceeded; mash water limited to {0:.1f} liters'
        print(msg.format(volumes.mash_water_l))

    steps = recipe_config.get('Mash', {}).get('steps', [])
    if steps and 'temperature' in steps[0]:
        grain_temp = lookup(config, recipe_config, 'Grain Temperature', 20.)
        strike = strike_temperature(steps[0]['temperature'],
                                    equipment.mash_thickness_l_per_kg, grain_temp)
        recipe_config['Strike Temperature'] = strike
        print('Strike Temperature: {0:.1f} degC'.format(strike))

    if 'Original Gravity' in recipe_config:
        og = recipe_config['Original Gravity']
        sg = pre_boil_gravity(og, batch_volume, volumes.pre_boil_l)
        recipe_config['Pre-Boil Gravity'] = sg
        sg = pre_boil_gravity(og, batch_volume, average_boil_volume)
        recipe_config['Average Gravity'] = sg
        msg = 'Pre-Boil Gravity: {0:.03f}'
        print(msg.format(recipe_config['Pre-Boil Gravity']))
    else:
        msg = 'Original Gravity not specified.'
        msg += ' Try running malt_composition first.'
        raise ValueError(msg)

    print('')
    return config, recipe_config


def water_chemistry(config, recipe_config):
    """Treated water profile from salt additions.

    Parameters
    ----------
     'Source Water' : string or dict
        Name of a packaged water profile (like 'RO' or 'Burton'), or
        the ppm of each ion: 'Ca', 'Mg', 'Na', 'Cl', 'SO4', 'HCO3'.
     'Salts' : dict
        Grams of each salt added to the brewing water: 'gypsum',
        'cacl2', 'epsom', 'nacl' and 'nahco3'. Missing salts count as
        zero. The salts are shared between the mash and sparge water
        in proportion to their volumes.
     'Mash Salts', 'Sparge Salts' : dict
        Instead of 'Salts', the grams of each salt added to the mash
        and to the sparge water separately. If either is given,
        'Salts' is ignored.
     'Water Profile' : string or dict
        Optional target, either a packaged style target (like 'Pilsner')
        or the ppm of each ion.
     'Ion Tolerance' : float
        Acceptable difference from the target, in ppm. Defaults to 20.
     'Mash Water Volume', 'Sparge Water Volume' : float
        Output from water_volume.

    Fields Appended to recipe_config
    --------------------------------
     'Mash Water Profile' : dict
        ppm of each ion in the treated mash water.
     'Water Profile Achieved' : dict
        ppm of each ion once mash and sparge water are combined, plus
        the 'Chloride to Sulfate Ratio' when there is sulfate.
     'Residual Alkalinity' : float
        Of the mash water, in ppm as CaCO3.
     'Water Profile Difference' : dict
        Only with a target. For each ion, the difference in ppm and
        whether it is 'ok', 'over' or 'under'.

    """
    source = named_profile(config, recipe_config['Source Water'])
    hint = 'Try running water_composition without a source water first.'
    mash_l = lookup(config, recipe_config, 'Mash Water Volume', required=True, hint=hint)
    sparge_l = lookup(config, recipe_config, 'Sparge Water Volume', required=True, hint=hint)

    if 'Mash Salts' in recipe_config or 'Sparge Salts' in recipe_config:
        mash_salts = salts_from_config(recipe_config, 'Mash Salts')
        sparge_salts = salts_from_config(recipe_config, 'Sparge Salts')
    else:
        mash_salts, sparge_salts = split_salts(salts_from_config(recipe_config),
                                               mash_l, sparge_l)

    mash_profile, _, profile = treated_waters(source, mash_salts, sparge_salts,
                                              mash_l, sparge_l)
    ratio = chloride_to_sulfate_ratio(profile)

    recipe_config['Mash Water Profile'] = dict(mash_profile._asdict())
    recipe_config['Residual Alkalinity'] = residual_alkalinity(mash_profile)
    print('Residual alkalinity: {0:.0f} ppm as CaCO3'.format(
        recipe_config['Residual Alkalinity']))

    achieved = dict(profile._asdict())
    for key in ION_KEYS:
        print('{0:.1f} ppm {1:s}'.format(achieved[key], key))
    if ratio is not None:
        achieved['Chloride to Sulfate Ratio'] = ratio
        msg = 'Chloride to sulfate ratio: {0:.1f} ({1:s})'
        print(msg.format(ratio, flavor_balance(ratio)))
    recipe_config['Water Profile Achieved'] = achieved

    if 'Water Profile' in recipe_config:
        target = named_profile(config, recipe_config['Water Profile'], 'targets')
        tolerance = lookup(config, recipe_config, 'Ion Tolerance', 20.)
        differences = profile_difference(profile, target, tolerance)
        recipe_config['Water Profile Difference'] = {
            key: {'difference': diff, 'status': band}
            for key, (diff, band) in differences.items()
        }
        for key in ION_KEYS:
            diff, band = differences[key]
            if band != 'ok':
                print('{0:s} {1:s} target by {2:.0f} ppm'.format(key, band, abs(diff)))

    print('')
    return config, recipe_config


def mash_ph(config, recipe_config):
    """Estimates the pH of the mash.

    Note: required parameters are in either config or
    recipe_config. Where applicable, if a parameter is specified in
    both config and recipe_config, the latter overrides the former.

    Parameters
    ----------
     'Malt' : array_like
        Grist, as used in malt_composition. The name, mass, color,
        type and (optional) 'distilled pH' of each malt are used here.
     'Mash Water Profile' : dict
        Output from water_chemistry. Without it the mash water is
        taken to be distilled.
     'Mash Water Volume' : float
        Output from water_volume.
     'Lactic Acid' : float or string
        88% lactic acid added to the mash, in milliliters or as a
        string like '1 teaspoon'.
     'Target Mash pH' : float
        Defaults to 5.4.

    Fields Appended to recipe_config
    --------------------------------
     'Mash pH' : float
        The predicted room temperature pH of the mash.
     'Mash pH Adjustment' : dict
        Only when the predicted pH misses the target: the 'lactic acid'
        (mL) or 'baking soda' (g) needed to hit it.

    """
    up = get_unit_parser(config)
    grain_bill = [parse_malt(up, malt) for malt in recipe_config.get('Malt', [])]
    mash_l = lookup(config, recipe_config, 'Mash Water Volume', required=True,
                    hint='Try running water_volume first.')
    lactic_acid = lookup(config, recipe_config, 'Lactic Acid', units='milliliters')

    mash_profile = None
    if 'Mash Water Profile' in recipe_config:
        mash_profile = profile_from_dict(recipe_config['Mash Water Profile'])

    ph = predict_mash_ph(grain_bill, mash_profile, mash_l, lactic_acid)
    if ph is None:
        return config, recipe_config

    recipe_config['Mash pH'] = ph
    msg = 'Mash pH: {0:.02f} (target between {1:.1f} and {2:.1f})'
    print(msg.format(ph, MASH_PH_RANGE[0], MASH_PH_RANGE[1]))

    target = lookup(config, recipe_config, 'Target Mash pH', DEFAULT_MASH_PH)
    mashable = [item for item in grain_bill if is_mashable(item.kind)]
    adjustment = ph_adjustment(ph, target, total_grain_mass_kg(mashable))
    if adjustment is not None:
        recipe_config['Mash pH Adjustment'] = {
            'target pH': adjustment.target_ph,
            'lactic acid': adjustment.lactic_acid_ml,
            'baking soda': adjustment.baking_soda_g,
        }
        if adjustment.lactic_acid_ml > 0:
            msg = 'Add {0:.1f} mL of 88% lactic acid to reach pH {1:.2f}'
            print(msg.format(adjustment.lactic_acid_ml, target))
        else:
            msg = 'Add {0:.1f} g of baking soda to reach pH {1:.2f}'
            print(msg.format(adjustment.baking_soda_g, target))

    print('')
    return config, recipe_config
