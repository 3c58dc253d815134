# References:
# Chris White and Jamil Zainasheff, Yeast: The Practical Guide to Beer
#   Fermentation (growth curve fit to inoculation rate)
# http://braukaiser.com/wiki/index.php/Yeast_Starter (cells per gram of
#   extract)
import datetime
import math
from collections import namedtuple
from .config import lookup, read_recipe_args, write_output
from .malt_composition import original_gravity, sg_to_plato
from .units import as_float, liters_to_gallons


DME_PPG = 45.
GRAMS_PER_POUND = 453.59237

# Fraction of liquid yeast that dies each day after manufacture
VIABILITY_LOSS_PER_DAY = 0.007

DRY_PACK_GRAMS = 11.
DRY_BILLION_PER_GRAM = 6.
LIQUID_PACK_BILLION = {
    'liquid': 100.,
    'liquid-200': 200.,
}
YEAST_TYPES = ('dry', 'liquid', 'liquid-200', 'slurry')

WHITE_COEFFICIENTS = (12.54793776, -0.4594858324, -0.9994994906)
SHAKING_BOOST = 0.5
MAX_GROWTH_FACTOR = 6.
# Starter wort supports at most this many billion cells per liter
SATURATION_BILLION_PER_L = 200.

BRAUKAISER_BILLION_PER_GRAM = 1.4

MIN_VOLUME_L = 1e-4

StarterStep = namedtuple('StarterStep',
                         ['volume_l', 'gravity', 'model', 'aeration'],
                         defaults=('white', 'none'))

StarterStepResult = namedtuple('StarterStepResult', ['dme_grams', 'end_cells'])

StarterResult = namedtuple('StarterResult',
                           ['required_cells', 'cells_available', 'steps',
                            'final_cells', 'diff', 'total_starter_l',
                            'total_dme_g'])


def required_cells(volume_l, og, pitch_rate=0.75):
    """Yeast cells to pitch.

    Parameters
    ----------
     volume_l : float
        Wort volume, in liters.
     og : float
        Original gravity, like 1.053
     pitch_rate : float
        Million cells per milliliter per degree Plato. 0.75 is typical
        for ales, 1.5 for lagers.

    Returns
    -------
     cells : float
        Billions of cells.

    """
    plato = sg_to_plato(as_float(og, 1.))
    return as_float(pitch_rate) * max(0., as_float(volume_l)) * max(0., plato)


def days_since(mfg_date, today=None):
    """Whole days since a manufacture date, or None if unknown.

    Parameters
    ----------
     mfg_date : datetime.date, datetime.datetime or string
        Manufacture date, or an ISO string like '2024-03-01'. The time
        of day is ignored.
     today : datetime.date
        Defaults to today.

    Returns
    -------
     days : int or None
        Never negative.

    """
    if not mfg_date:
        return None
    if isinstance(mfg_date, str):
        try:
            mfg_date = datetime.date.fromisoformat(mfg_date[:10])
        except ValueError:
            return None
    elif isinstance(mfg_date, datetime.datetime):
        mfg_date = mfg_date.date()
    if today is None:
        today = datetime.date.today()
    elif isinstance(today, datetime.datetime):
        today = today.date()
    return max(0, (today - mfg_date).days)


def viability(days):
    """Fraction of liquid yeast still alive after some days."""
    if days is None:
        return 1.
    days = max(0., as_float(days))
    return max(0., min(1., 1. - VIABILITY_LOSS_PER_DAY * days))


def cells_available(yeast_type, packs=1, days_since_manufacture=None,
                    slurry_l=0., slurry_billion_per_ml=0.):
    """Cells in the yeast as purchased (or harvested).

    Parameters
    ----------
     yeast_type : string
        'dry' (11 gram sachets), 'liquid' (100 billion cell packs),
        'liquid-200' (200 billion cell packs) or 'slurry'.
     packs : float
        Number of packs; partial packs are ignored.
     days_since_manufacture : float
        Age of liquid yeast. Unknown age means fully viable.
     slurry_l, slurry_billion_per_ml : float
        Slurry volume and density; only used for slurry.

    Returns
    -------
     cells : float
        Billions of cells.

    """
    packs = max(0, math.floor(as_float(packs)))
    if yeast_type == 'dry':
        return packs * DRY_PACK_GRAMS * DRY_BILLION_PER_GRAM
    elif yeast_type == 'slurry':
        return (max(0., as_float(slurry_l)) * 1000.
                * max(0., as_float(slurry_billion_per_ml)))
    else:
        per_pack = LIQUID_PACK_BILLION.get(yeast_type, LIQUID_PACK_BILLION['liquid'])
        return packs * per_pack * viability(days_since_manufacture)


def dme_grams_for_gravity(liters, gravity, ppg=DME_PPG):
    """Dry malt extract needed to make a starter.

    Parameters
    ----------
     liters : float
        Starter volume.
     gravity : float
        Starter gravity, like 1.036
     ppg : float
        Gravity points per pound per gallon of the extract.

    Returns
    -------
     grams : float
        Grams of extract.

    """
    points = max(0., (as_float(gravity, 1.) - 1.) * 1000.)
    gallons = liters_to_gallons(as_float(liters))
    pounds = points * gallons / max(MIN_VOLUME_L, as_float(ppg, DME_PPG))
    return pounds * GRAMS_PER_POUND


def white_growth(current, liters, aeration='none'):
    """Cells after a starter step, per the White growth curve.

    The growth factor falls with the inoculation rate (billion cells
    per liter), is boosted by shaking, and is clamped to [0, 6]. The
    wort cannot hold more than 200 billion cells per liter.

    Parameters
    ----------
     current : float
        Billions of cells pitched into the starter.
     liters : float
        Starter volume. Negative volumes count as empty.
     aeration : string
        'none' or 'shaking'.

    Returns
    -------
     cells : float
        Billions of cells at the end of the step, never negative.

    """
    current = max(0., as_float(current))
    if current <= 0:
        return 0.
    liters = max(0., as_float(liters))
    a, b, c = WHITE_COEFFICIENTS
    rate = current / max(MIN_VOLUME_L, liters)
    factor = a * rate ** b + c
    if aeration == 'shaking':
        factor += SHAKING_BOOST
    factor = max(0., min(MAX_GROWTH_FACTOR, factor))
    return min(SATURATION_BILLION_PER_L * liters, current * (1. + factor))


def braukaiser_growth(current, liters, gravity):
    """Cells after a starter step, per the Braukaiser model.

    Growth is proportional to the extract in the starter, regardless
    of how many cells were pitched.

    """
    grams = dme_grams_for_gravity(liters, gravity)
    return max(0., as_float(current)) + BRAUKAISER_BILLION_PER_GRAM * grams


GROWTH_MODELS = {
    'white': lambda current, step: white_growth(current, step.volume_l, step.aeration),
    'braukaiser': lambda current, step: braukaiser_growth(current, step.volume_l, step.gravity),
}


def starter_plan(required, available, steps):
    """Step up yeast through one or more starters.

    Parameters
    ----------
     required : float
        Billions of cells needed, e.g. from required_cells.
     available : float
        Billions of cells to start with, e.g. from cells_available.
     steps : array_like of StarterStep
        Starter steps, in order. Each step is pitched with all of the
        cells from the step before. None counts as no steps.

    Returns
    -------
     result : StarterResult
        diff is the final cell count less the required count, so
        negative means underpitching.

    """
    required = as_float(required)
    available = as_float(available)
    current = max(0., available)

    results = []
    total_l = 0.
    total_dme = 0.
    for step in steps or []:
        grams = dme_grams_for_gravity(step.volume_l, step.gravity)
        # Unknown models grow nothing
        if step.model in GROWTH_MODELS:
            current = GROWTH_MODELS[step.model](current, step)
        results.append(StarterStepResult(grams, current))
        total_l += as_float(step.volume_l)
        total_dme += grams

    final = results[-1].end_cells if results else available
    return StarterResult(required, available, results, final, final - required,
                         total_l, total_dme)


def main():
    """Entry point for yeast_starter command line script.

    """
    config, recipe_config = read_recipe_args()
    execute(config, recipe_config)


def execute(config, recipe_config):
    """Size a yeast starter for the recipe.

    Note: required parameters are in either config or
    recipe_config. Where applicable, if a parameter is specified in
    both config and recipe_config, the latter overrides the former.

    Parameters
    ----------
     'Original Gravity' : float
        Output from malt_composition.
     'Batch Volume' : float or string
        Volume of wort to pitch into, in liters.
     'Pitch Rate' : float
        Million cells per mL per degree Plato; defaults to 0.75.
     'Starter' : dict
        Describes the yeast and the starter steps:
          'yeast type' : 'dry', 'liquid', 'liquid-200' or 'slurry'
          'packs' : number of packs
          'manufacture date' : ISO date, for liquid yeast
          'slurry volume' : liters of slurry
          'slurry density' : billion cells per mL of slurry
          'steps' : array of steps, each with 'volume' (liters),
            'gravity', 'model' ('white' or 'braukaiser') and
            'aeration' ('none' or 'shaking').

    Fields Appended to recipe_config
    --------------------------------
     'Starter Result' : dict
        Required and available cells, cells after each step, DME
        needed, and the surplus (or shortfall, if negative).

    """
    og = original_gravity(recipe_config)
    batch_volume = lookup(config, recipe_config, 'Batch Volume', 20., 'liters')
    pitch_rate = lookup(config, recipe_config, 'Pitch Rate', 0.75)

    starter = recipe_config.get('Starter', {})
    yeast_type = starter.get('yeast type', 'liquid')
    if yeast_type not in YEAST_TYPES:
        raise ValueError('Unknown yeast type: {0:s}'.format(yeast_type))

    available = cells_available(yeast_type, starter.get('packs', 1),
                                days_since(starter.get('manufacture date')),
                                starter.get('slurry volume', 0.),
                                starter.get('slurry density', 0.))
    steps = [StarterStep(step.get('volume', 0.), step.get('gravity', 1.036),
                         step.get('model', 'white'), step.get('aeration', 'none'))
             for step in starter.get('steps', [])]

    result = starter_plan(required_cells(batch_volume, og, pitch_rate), available, steps)

    print('Cells needed: {0:.0f} billion'.format(result.required_cells))
    print('Cells available: {0:.0f} billion'.format(result.cells_available))
    for i, step in enumerate(result.steps):
        msg = 'Step {0:d}: {1:.0f} g DME, {2:.0f} billion cells'
        print(msg.format(i + 1, step.dme_grams, step.end_cells))
    if result.diff < 0:
        print('Underpitching by {0:.0f} billion cells'.format(-result.diff))
    else:
        print('Overpitching by {0:.0f} billion cells'.format(result.diff))

    recipe_config['Starter Result'] = {
        'required cells': result.required_cells,
        'cells available': result.cells_available,
        'steps': [step._asdict() for step in result.steps],
        'final cells': result.final_cells,
        'difference': result.diff,
        'total volume': result.total_starter_l,
        'total dme': result.total_dme_g,
    }

    write_output(config, recipe_config)
    return config, recipe_config


if __name__ == '__main__':
    main()
