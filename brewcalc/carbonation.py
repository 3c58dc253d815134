from .config import lookup, read_recipe_args, write_output
from .units import as_float, celsius_to_fahrenheit, psi_to_bar


def carbonation_pressure_psi(temperature_f, volumes_co2):
    """Regulator pressure for force carbonation.

    Parameters
    ----------
     temperature_f : float
        Beer temperature, in degrees Fahrenheit.
     volumes_co2 : float
        Desired carbonation, in volumes of CO2, like 2.5

    Returns
    -------
     psi : float
        Gauge pressure, in psi. Never negative.

    Notes
    -----
     Regression fit to the usual keg carbonation chart, valid for
     roughly 30 to 60 degF and 1.5 to 4 volumes.

    """
    t = as_float(temperature_f)
    v = as_float(volumes_co2)
    psi = (-16.6999 - 0.0101059 * t + 0.00116512 * t ** 2 + 0.173354 * t * v
           + 4.24267 * v - 0.0684226 * v ** 2)
    return max(0., psi)


def carbonation_pressure_bar(temperature_c, volumes_co2):
    """Regulator pressure in bar, for a temperature in degC."""
    return psi_to_bar(carbonation_pressure_psi(celsius_to_fahrenheit(as_float(temperature_c)),
                                               volumes_co2))


def main():
    """Entry point for carbonation command line script.

    """
    config, recipe_config = read_recipe_args()
    execute(config, recipe_config)


def execute(config, recipe_config):
    """Keg pressure to reach the desired carbonation.

    Parameters
    ----------
     'Carbonation' : float
        Volumes of CO2. Defaults to 2.4.
     'Serving Temperature' : float
        Beer temperature in the keg, in degC. Defaults to 4.

    Fields Appended to recipe_config
    --------------------------------
     'Keg Pressure' : float
        Regulator pressure, in psi.

    """
    volumes = lookup(config, recipe_config, 'Carbonation', 2.4)
    temperature = lookup(config, recipe_config, 'Serving Temperature', 4.)

    psi = carbonation_pressure_psi(celsius_to_fahrenheit(temperature), volumes)
    recipe_config['Keg Pressure'] = psi
    msg = 'Keg Pressure: {0:.1f} psi ({1:.2f} bar)'
    print(msg.format(psi, psi_to_bar(psi)))

    write_output(config, recipe_config)
    return config, recipe_config


if __name__ == '__main__':
    main()
