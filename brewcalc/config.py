import json
import os
from unit_parser import unit_parser


def resource_path(filename):
    """Path to a file shipped in the brewcalc resources directory."""
    this_dir, this_filename = os.path.split(__file__)
    return os.path.join(this_dir, 'resources', filename)


def load_config():
    """Load the packaged brewing defaults.

    The top-level file is resources/homebrew.json. Its 'files' entry
    names companion resources; each one is loaded and stored in the
    config under the same key, except 'units', which is a unit
    definition file handed to unit_parser by path.

    Returns
    -------
     config : dict
        Default brewing parameters.

    """
    with open(resource_path('homebrew.json'), 'r') as infile:
        config = json.load(infile)

    for key, filename in config.get('files', {}).items():
        if key == 'units':
            config['units'] = resource_path(filename)
        else:
            with open(resource_path(filename), 'r') as infile:
                config[key] = json.load(infile)

    return config


def get_unit_parser(config):
    """Unit parser for this config, created on first use."""
    if 'unit_parser' not in config:
        if 'units' in config:
            config['unit_parser'] = unit_parser(config['units'])
        else:
            config['unit_parser'] = unit_parser()
    return config['unit_parser']


def quantity(up, value, units):
    """Express a recipe quantity in the given units.

    Parameters
    ----------
     up : unit_parser
        Unit parser used for strings.
     value : float or string
        Either a number, already in the requested units, or a string
        with its own units, like '5 gallons'.
     units : string
        Desired units, e.g. 'liters'.

    Returns
    -------
     value : float
        The quantity expressed in the desired units.

    """
    if isinstance(value, str):
        return up.convert(value, units)
    return float(value)


def lookup(config, recipe_config, key, default=None, units=None,
           required=False, hint=None):
    """Look up a parameter in recipe_config, then config.

    Where applicable, if a parameter is specified in both config and
    recipe_config, the latter overrides the former.

    Parameters
    ----------
     config : dict
        Brewing defaults, e.g. from load_config.
     recipe_config : dict
        Recipe parameters.
     key : string
        Parameter name, like 'Boil Time'.
     default : object
        Value used when neither dictionary has the key. A note is
        printed whenever a non-None default is used.
     units : string or None
        If given, the value is converted to these units.
     required : bool
        If True, a missing parameter raises ValueError instead.
     hint : string or None
        Appended to the error message, e.g. which script to run first.

    Returns
    -------
     value : object
        The parameter value.

    """
    if key in recipe_config:
        value = recipe_config[key]
    elif key in config:
        value = config[key]
    elif required:
        msg = '{0:s} not specified.'.format(key)
        if hint is not None:
            msg += ' ' + hint
        raise ValueError(msg)
    else:
        if default is not None:
            msg = '{0:s} not specified, assuming {1}'.format(key, default)
            if units is not None:
                msg += ' ' + units
            print(msg)
        return default

    if units is None or value is None:
        return value
    return quantity(get_unit_parser(config), value, units)


def read_recipe_args():
    """Parse the command line shared by all brewcalc scripts.

    Returns
    -------
     config : dict
        Packaged defaults, with 'Output' set if requested.
     recipe_config : dict
        The recipe JSON named on the command line.

    """
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument('recipe', type=str, help='Recipe JSON')
    parser.add_argument('-o', '--output', type=str, help='Output file')

    args = parser.parse_args()
    config = load_config()
    with open(args.recipe, 'r') as infile:
        recipe_config = json.load(infile)
    if args.output:
        config['Output'] = args.output

    return config, recipe_config


def write_output(config, recipe_config):
    if 'Output' in config:
        with open(config['Output'], 'w') as outfile:
            json.dump(recipe_config, outfile, indent=2, sort_keys=True)
