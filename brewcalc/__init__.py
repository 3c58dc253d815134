from . import config
from . import units
from . import malt_composition
from . import hop_composition
from . import yeast_composition
from . import yeast_starter
from . import water_composition
from . import carbonation
from . import brew_day
from . import recipe_calc

from .config import load_config, lookup, quantity
from .units import (as_float, celsius_to_fahrenheit, fahrenheit_to_celsius,
                    liters_to_gallons, gallons_to_liters, kilograms_to_pounds,
                    pounds_to_kilograms, grams_to_ounces, ounces_to_grams,
                    psi_to_bar, bar_to_psi)
from .malt_composition import (GrainBillItem, points_from_grain_bill, og_from_points,
                               mcu_from_grain_bill, srm_morey_from_mcu,
                               srm_to_display_color, srm_to_rgb, sg_to_plato,
                               total_grain_mass_kg, original_gravity,
                               gravity_points_to_specific_gravity,
                               specific_gravity_to_gravity_points,
                               percentages_from_weights, weights_from_percentages)
from .hop_composition import (HopAddition, bigness_factor, boil_time_factor,
                              hop_utilization, whirlpool_temperature_factor,
                              addition_utilization, ibu_single_addition, ibu_total,
                              kettle_hop_mass_kg)
from .yeast_composition import (MashStep, FermentationStep, FERMENTATION_STAGES,
                                abv_simple, abv_alternative, abv_calc, attenuation,
                                predict_final_gravity, effective_attenuation,
                                estimate_final_gravity, fermentation_metrics, nutrition)
from .yeast_starter import (StarterStep, StarterStepResult, StarterResult,
                            required_cells, viability, days_since, cells_available,
                            dme_grams_for_gravity, white_growth, braukaiser_growth,
                            starter_plan)
from .water_composition import (EquipmentParams, WaterVolumes, WaterProfile,
                                SaltAdditions, PhAdjustment, ION_KEYS, effective_kettle_loss,
                                pre_boil_volume, mash_water, sparge_water,
                                sparge_from_mash_used, water_volumes, pre_boil_gravity,
                                strike_temperature, ion_delta, mix_profiles,
                                add_profiles, scale_profile, clamp_profile,
                                zero_profile, treated_profile, split_salts, treated_waters,
                                chloride_to_sulfate_ratio, profile_difference,
                                residual_alkalinity, effective_alkalinity,
                                classify_grain_for_ph, grain_distilled_ph,
                                predict_mash_ph, ph_adjustment)
from .carbonation import carbonation_pressure_psi, carbonation_pressure_bar
from .brew_day import (potential_points, apparent_attenuation, mash_efficiency,
                       brewhouse_efficiency, evaporation_rate)
from .recipe_calc import Recipe, RecipeResult, calculate
