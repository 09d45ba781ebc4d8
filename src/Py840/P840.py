# -*- coding: utf-8 -*-
# pylint: disable=invalid-name,line-too-long,too-many-arguments,too-many-locals
"""
Created on 19 Oct 2026

Cloud and fog attenuation on Earth-space paths according to
Recommendation ITU-R P.840-9

@author: Py840 contributors
"""
import os
import re
import warnings
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np


# Constants class
class Const:
    T_REF = 273.75               # Reference temperature (K)

    # Gaussian fit of K_L (Equations 12, 14 and 16)
    A_1 = 0.1522
    A_2 = 11.51
    A_3 = -10.4912
    F_1 = -23.9589
    F_2 = 219.2096
    SIGMA_1 = 3.2991e3
    SIGMA_2 = 2.7595e6

    # Note to Equation 15: P_L <= 0.02 % => A_C = 0
    P_L_THRESHOLD = 0.02

    # Digital maps geometry (721 x 1441 points, 0.25 deg)
    N_LAT = 721
    N_LON = 1441
    LAT_START = -90.0
    LAT_STEP = 0.25
    LON_START = -180.0
    LON_STEP = 0.25

    # Inverse normal CCDF
    Q_EPSILON = 1e-16
    Q_TAIL = 0.02425

    # Input parameter ranges
    LAT_MIN = -90.0
    LAT_MAX = 90.0
    LON_MIN = -180.0
    LON_MAX = 180.0
    P_MIN_ANNUAL = 0.01
    P_MIN_MONTHLY = 0.1
    P_MAX = 100.0
    F_GHZ_MIN = 1.0
    F_GHZ_MAX = 200.0
    THETA_MIN = 0.0
    THETA_MAX = 90.0

    # Folders of the digital maps package
    ANNUAL_DIR = "annual"
    LOGNORMAL_DIR = "logNormalAnnual"
    LOGNORMAL_FILES = ("mL.TXT", "sL.TXT", "PL.TXT")

    # Return codes
    SUCCESS = 0
    ERROR_VALIDATION__F_GHZ_LOW = 1
    ERROR_VALIDATION__F_GHZ_HIGH = 2
    ERROR_VALIDATION__LAT = 3
    ERROR_VALIDATION__LON = 4
    ERROR_VALIDATION__PERCENT_LOW = 5
    ERROR_VALIDATION__PERCENT_HIGH = 6
    ERROR_VALIDATION__THETA = 7

    MESSAGES = {
        ERROR_VALIDATION__F_GHZ_LOW: "Frequency is below 1 GHz",
        ERROR_VALIDATION__F_GHZ_HIGH: "Frequency is above 200 GHz",
        ERROR_VALIDATION__LAT: "Latitude is outside [-90, 90] degrees",
        ERROR_VALIDATION__LON: "Longitude is outside [-180, 180] degrees",
        ERROR_VALIDATION__PERCENT_LOW: "Exceedance probability must be larger than 0 %",
        ERROR_VALIDATION__PERCENT_HIGH: "Exceedance probability is above 100 %",
        ERROR_VALIDATION__THETA: "Elevation angle is outside (0, 90] degrees",
    }

    @staticmethod
    def monthly_dir(month: int) -> str:
        """Folder name of the monthly L(p) maps, e.g. 'month03'"""
        if month < 1 or month > 12:
            raise ValueError("Month must be between 1 and 12, got " + str(month) + ".")
        return f"month{month:02d}"


@dataclass(frozen=True)
class DebyeParameters:
    """Double-Debye model parameters of liquid water (Equations 6-10)"""
    epsilon_0: float
    epsilon_1: float
    epsilon_2: float
    f_p: float                    # Principal relaxation frequency (GHz)
    f_s: float                    # Secondary relaxation frequency (GHz)


@dataclass
class LogNormalGrids:
    """Digital maps of the log-normal parameters"""
    m_L: np.ndarray
    s_L: np.ndarray
    P_L: np.ndarray


def debye_parameters(T_kelvin: float) -> DebyeParameters:
    """
    Compute the double-Debye parameters at temperature T.

    Parameters:
    -----------
    T_kelvin : float
        Temperature, in K

    Returns:
    --------
    params : DebyeParameters
        epsilon_0, epsilon_1, epsilon_2, f_p and f_s
    """
    theta = np.float64(300.0) / T_kelvin - 1.0

    epsilon_0 = 77.66 + 103.3 * theta                      # [Eqn 6]
    epsilon_1 = 0.0671 * epsilon_0                         # [Eqn 7]
    epsilon_2 = np.float64(3.52)                           # [Eqn 8]

    f_p = 20.20 - 146.0 * theta + 316.0 * theta * theta    # [Eqn 9]
    f_s = 39.8 * f_p                                       # [Eqn 10]

    return DebyeParameters(epsilon_0, epsilon_1, epsilon_2, f_p, f_s)


# Computed once, at the reference temperature of the Recommendation
DEBYE = debye_parameters(Const.T_REF)


def epsilon_real(f_ghz: float) -> float:
    """Real part of the complex permittivity of water [Eqn 5]"""
    d = DEBYE
    term_1 = (d.epsilon_0 - d.epsilon_1) / (1.0 + (f_ghz / d.f_p)**2)
    term_2 = (d.epsilon_1 - d.epsilon_2) / (1.0 + (f_ghz / d.f_s)**2)

    return term_1 + term_2 + d.epsilon_2


def epsilon_imag(f_ghz: float) -> float:
    """Imaginary part of the complex permittivity of water [Eqn 4]"""
    d = DEBYE
    term_1 = f_ghz * (d.epsilon_0 - d.epsilon_1) / (d.f_p * (1.0 + (f_ghz / d.f_p)**2))
    term_2 = f_ghz * (d.epsilon_1 - d.epsilon_2) / (d.f_s * (1.0 + (f_ghz / d.f_s)**2))

    return term_1 + term_2


def eta(f_ghz: float) -> float:
    """[Eqn 3]"""
    return (2.0 + epsilon_real(f_ghz)) / epsilon_imag(f_ghz)


def specific_attenuation_coefficient(f_ghz: float) -> float:
    """
    Compute the cloud liquid water specific attenuation coefficient K_l.

    Parameters:
    -----------
    f_ghz : float
        Frequency, in GHz

    Returns:
    --------
    K_l : float
        Specific attenuation coefficient, in (dB/km)/(g/m^3)
    """
    e_2 = epsilon_imag(f_ghz)
    n = eta(f_ghz)

    K_l = 0.819 * f_ghz / (e_2 * (1.0 + n**2))  # [Eqn 2]

    return K_l


def specific_attenuation(f_ghz: float, M_g_m3: float) -> float:
    """
    Compute the specific attenuation within a cloud or fog.

    Parameters:
    -----------
    f_ghz : float
        Frequency, in GHz
    M_g_m3 : float
        Liquid water density in the cloud or fog, in g/m^3

    Returns:
    --------
    gamma_c : float
        Specific attenuation, in dB/km
    """
    gamma_c = specific_attenuation_coefficient(f_ghz) * M_g_m3  # [Eqn 1]

    return gamma_c


def mass_absorption_coefficient(f_ghz: float) -> float:
    """
    Compute the cloud liquid mass absorption coefficient K_L.

    The Gaussian fit is valid between 1 and 200 GHz. Outside this range
    the returned value is an extrapolation.

    Parameters:
    -----------
    f_ghz : float
        Frequency, in GHz

    Returns:
    --------
    K_L : float
        Mass absorption coefficient, in dB/(kg/m^2)
    """
    K_l = specific_attenuation_coefficient(f_ghz)

    term_1 = Const.A_1 * np.exp(-(f_ghz - Const.F_1)**2 / Const.SIGMA_1)
    term_2 = Const.A_2 * np.exp(-(f_ghz - Const.F_2)**2 / Const.SIGMA_2)

    K_L = K_l * (term_1 + term_2 + Const.A_3)  # [Eqn 12]

    return K_L


def validate_inputs(f_ghz: float, theta_deg: float, lat: float = None,
                    lon: float = None, p: float = None) -> int:
    """Validate the model input values, None values are not checked"""
    if f_ghz < Const.F_GHZ_MIN:
        return Const.ERROR_VALIDATION__F_GHZ_LOW

    if f_ghz > Const.F_GHZ_MAX:
        return Const.ERROR_VALIDATION__F_GHZ_HIGH

    if lat is not None and (lat < Const.LAT_MIN or lat > Const.LAT_MAX):
        return Const.ERROR_VALIDATION__LAT

    if lon is not None and (lon < Const.LON_MIN or lon > Const.LON_MAX):
        return Const.ERROR_VALIDATION__LON

    if p is not None and p <= 0:
        return Const.ERROR_VALIDATION__PERCENT_LOW

    if p is not None and p > Const.P_MAX:
        return Const.ERROR_VALIDATION__PERCENT_HIGH

    if theta_deg <= Const.THETA_MIN or theta_deg > Const.THETA_MAX:
        return Const.ERROR_VALIDATION__THETA

    return Const.SUCCESS


def warn_inputs(f_ghz, theta_deg, lat=None, lon=None, p=None):
    err = validate_inputs(f_ghz, theta_deg, lat, lon, p)
    if err != Const.SUCCESS:
        warnings.warn("P840: " + Const.MESSAGES[err] + ". The result is not validated by the Recommendation.",
                      stacklevel=3)
    return err


"""
Prediction methods of Recommendation ITU-R P.840-9

    instantaneous_attenuation   - Equation (11), known L
    statistical_attenuation     - Equation (13), digital maps of L(p)
    lognormal_attenuation       - Equation (15), digital maps of m_L, s_L, P_L

Inputs outside of the validity range of the Recommendation raise a
UserWarning, the computed value is returned unchanged. An elevation angle
of 0 deg gives an infinite attenuation.
"""


def instantaneous_attenuation(f_ghz: float, L: float, theta_deg: float) -> float:
    """
    Compute the slant path instantaneous cloud attenuation.

    Parameters:
    -----------
    f_ghz : float
        Frequency, in GHz
    L : float
        Integrated cloud liquid water content, in kg/m^2 (or mm)
    theta_deg : float
        Elevation angle, in deg

    Returns:
    --------
    A_c : float
        Attenuation, in dB
    """
    warn_inputs(f_ghz, theta_deg)

    return slant_path(f_ghz, L, theta_deg)


def slant_path(f_ghz, L, theta_deg):
    K_L = mass_absorption_coefficient(f_ghz)

    A_c = K_L * L / np.sin(np.deg2rad(theta_deg))  # [Eqn 11]

    return A_c


def probability_bracket(probabilities: np.ndarray, p: float) -> Tuple[float, float]:
    """
    Return the largest probability <= p and the smallest probability >= p.

    Both values collapse to the first (last) element when p lies below
    (above) all elements of the ascending array.

    Parameters:
    -----------
    probabilities : np.ndarray
        Ascending array of exceedance probabilities, in %
    p : float
        Exceedance probability, in %

    Returns:
    --------
    p_below, p_above : float
    """
    k = np.where(probabilities <= p)[0]
    if len(k) == 0:
        p_below = probabilities[0]
    else:
        p_below = probabilities[k[-1]]

    k = np.where(probabilities >= p)[0]
    if len(k) == 0:
        p_above = probabilities[-1]
    else:
        p_above = probabilities[k[0]]

    return float(p_below), float(p_above)


def lp(lat: float, lon: float, p: float, grids_by_probability: Dict[float, np.ndarray]) -> float:
    """
    Compute L(p), the integrated cloud liquid water content exceeded for
    p % of the time, as described in Section 4.2.1 of ITU-R P.840-9

    Parameters:
    -----------
    lat : float
        Latitude, in deg
    lon : float
        Longitude, in deg
    p : float
        Exceedance probability, in %
    grids_by_probability : dict
        Digital maps of L(p) keyed by exceedance probability p, in %

    Returns:
    --------
    L : float
        Integrated cloud liquid water content, in kg/m^2
    """
    if len(grids_by_probability) == 0:
        raise ValueError("The collection of L(p) digital maps is empty.")

    probabilities = np.array(sorted(grids_by_probability))
    p_below, p_above = probability_bracket(probabilities, p)

    if p_below == p_above:
        return bilinear_interpolation(lat, lon, grids_by_probability[p_below])

    L_below = bilinear_interpolation(lat, lon, grids_by_probability[p_below])
    L_above = bilinear_interpolation(lat, lon, grids_by_probability[p_above])

    # Section 4.2.1 d), linear interpolation in log10(p)
    L = L_below + (L_above - L_below) * (np.log10(p) - np.log10(p_below)) / (np.log10(p_above) - np.log10(p_below))

    return L


def statistical_attenuation(f_ghz: float, lat: float, lon: float, p: float,
                            theta_deg: float, grids_by_probability: Dict[float, np.ndarray]) -> float:
    """
    Compute the slant path statistical cloud attenuation exceeded for
    p % of the time (Equation 13 of ITU-R P.840-9)

    Parameters:
    -----------
    f_ghz : float
        Frequency, in GHz
    lat : float
        Latitude, in deg
    lon : float
        Longitude, in deg
    p : float
        Exceedance probability, in %
    theta_deg : float
        Elevation angle, in deg
    grids_by_probability : dict
        Digital maps of L(p) keyed by exceedance probability p, in %
        (see load_grids_by_probability)

    Returns:
    --------
    A_c : float
        Attenuation, in dB
    """
    warn_inputs(f_ghz, theta_deg, lat, lon, p)

    L = lp(lat, lon, p, grids_by_probability)

    return slant_path(f_ghz, L, theta_deg)  # [Eqn 13]


def lognormal_term(p: float, m_L: float, s_L: float, P_L: float) -> float:
    """
    Compute the log-normal term of Equation (15):
    exp(m_L + s_L * Q^-1(p/P_L)) for p < P_L, and exp(m_L) otherwise.
    """
    if p < P_L:
        return np.exp(m_L + s_L * inverse_ccdf(p / P_L))
    return np.exp(m_L)


def lognormal_attenuation(f_ghz: float, lat: float, lon: float, p: float, theta_deg: float,
                          m_L_grid: np.ndarray, s_L_grid: np.ndarray, P_L_grid: np.ndarray) -> float:
    """
    Compute the log-normal approximation to the slant path statistical cloud
    attenuation (Equation 15 of ITU-R P.840-9)

    A_c = 0 whenever any of the four grid points surrounding the location
    has P_L <= 0.02 %, or when the interpolated P_L <= 0.02 %, or p >= P_L.

    Parameters:
    -----------
    f_ghz : float
        Frequency, in GHz
    lat : float
        Latitude, in deg
    lon : float
        Longitude, in deg
    p : float
        Exceedance probability, in %
    theta_deg : float
        Elevation angle, in deg
    m_L_grid : np.ndarray
        Digital map of the log-normal mean parameter m_L
    s_L_grid : np.ndarray
        Digital map of the log-normal standard deviation parameter s_L
    P_L_grid : np.ndarray
        Digital map of the probability of cloud P_L, in %

    Returns:
    --------
    A_c : float
        Attenuation, in dB
    """
    warn_inputs(f_ghz, theta_deg, lat, lon, p)

    if any_corner_below_threshold(lat, lon, P_L_grid):
        return 0.0

    m_L = bilinear_interpolation(lat, lon, m_L_grid)
    s_L = bilinear_interpolation(lat, lon, s_L_grid)
    P_L = bilinear_interpolation(lat, lon, P_L_grid)

    if P_L <= Const.P_L_THRESHOLD or p >= P_L:
        return 0.0

    K_L = mass_absorption_coefficient(f_ghz)

    A_c = K_L * np.exp(m_L + s_L * inverse_ccdf(p / P_L)) / np.sin(np.deg2rad(theta_deg))  # [Eqn 15]

    return A_c


def grid_corners(lat: float, lon: float) -> Tuple[int, int, int, int]:
    """
    Return the indices of the four grid points surrounding (lat, lon).

    The latitude index is clamped so that the northern row exists. The
    longitude index is not clamped. The eastern column never wraps to
    column 0, which duplicates column 1440 (-180 deg = 180 deg).

    Parameters:
    -----------
    lat : float
        Latitude, in deg
    lon : float
        Longitude, in deg

    Returns:
    --------
    i_s, i_n, j_w, j_e : int
        Southern and northern row, western and eastern column
    """
    i_s = int(np.floor((lat - Const.LAT_START) / Const.LAT_STEP))
    i_s = max(0, min(i_s, Const.N_LAT - 2))
    i_n = i_s + 1

    j_w = int(np.floor((lon - Const.LON_START) / Const.LON_STEP))
    if j_w < 0 or j_w > Const.N_LON - 1:
        raise IndexError("Longitude " + str(lon) + " deg is outside of the digital map.")

    j_e = (j_w + 1) % Const.N_LON
    if j_e == 0:
        j_e = 1

    return i_s, i_n, j_w, j_e


def bilinear_interpolation(lat: float, lon: float, grid: np.ndarray) -> float:
    """
    Bilinear interpolation of a digital map (ITU-R P.1144, Annex 1).

    NaN grid points are ignored and the weights of the remaining points are
    renormalized. When all four points are NaN the function returns 0.

    Parameters:
    -----------
    lat : float
        Latitude, in deg
    lon : float
        Longitude, in deg
    grid : np.ndarray
        Digital map, 721 x 1441

    Returns:
    --------
    value : float
        Interpolated value at (lat, lon)
    """
    i_s, i_n, j_w, j_e = grid_corners(lat, lon)

    lat_s = Const.LAT_START + i_s * Const.LAT_STEP
    lat_n = Const.LAT_START + i_n * Const.LAT_STEP
    lon_w = Const.LON_START + j_w * Const.LON_STEP
    lon_e = Const.LON_START + j_e * Const.LON_STEP

    x = (lon - lon_w) / (lon_e - lon_w)
    y = (lat - lat_s) / (lat_n - lat_s)

    values = (grid[i_s, j_w], grid[i_s, j_e], grid[i_n, j_w], grid[i_n, j_e])
    weights = ((1 - x) * (1 - y), x * (1 - y), (1 - x) * y, x * y)

    weighted_sum = 0.0
    total_weight = 0.0

    for value, weight in zip(values, weights):
        if not np.isnan(value):
            weighted_sum += value * weight
            total_weight += weight

    if total_weight > 0.0:
        return weighted_sum / total_weight
    return 0.0


def any_corner_below_threshold(lat: float, lon: float, P_L_grid: np.ndarray) -> bool:
    """True if any of the four P_L grid points around (lat, lon) is <= 0.02 %"""
    i_s, i_n, j_w, j_e = grid_corners(lat, lon)

    corners = (P_L_grid[i_s, j_w], P_L_grid[i_s, j_e], P_L_grid[i_n, j_w], P_L_grid[i_n, j_e])

    return any(value <= Const.P_L_THRESHOLD for value in corners)


def inverse_ccdf(x: float) -> float:
    """
    Compute the inverse standard normal complementary cumulative
    distribution function Q^-1(x).

    This is the rational approximation given in Recommendation ITU-R
    P.1057-7, Equations (5c)-(5e). The argument is clamped to
    [1e-16, 1 - 1e-16].

    Parameters:
    -----------
    x : float
        Probability, 0.0 < x < 1.0

    Returns:
    --------
    Q_x : float
        Value y such that Q(y) = x
    """
    # Equation (5d)
    c = (2.938163982698783, 4.374664141464968, -2.549732539343734,
         -2.400758277161838, -0.3223964580411365, -0.007784894002430293)
    d = (3.754408661907416, 2.445134137142996, 0.3224671290700398,
         0.007784695709041462)

    # Equation (5e)
    a = (2.506628277459239, -30.66479806614716, 138.3577518672690,
         -275.9285104469687, 220.9460984245205, -39.69683028665376)
    b = (-13.28068155288572, 66.80131188771972, -155.6989798598866,
         161.5858368580409, -54.47609879822406)

    x = max(Const.Q_EPSILON, min(1.0 - Const.Q_EPSILON, x))

    q = x
    if x > 0.5:
        q = 1.0 - x

    if q <= Const.Q_TAIL:
        t = np.sqrt(-2.0 * np.log(q))
        y = ((((((c[5] * t + c[4]) * t + c[3]) * t + c[2]) * t + c[1]) * t + c[0]) /
             ((((d[3] * t + d[2]) * t + d[1]) * t + d[0]) * t + 1.0))
    else:
        delta = q - 0.5
        t = delta * delta
        y = ((((((a[5] * t + a[4]) * t + a[3]) * t + a[2]) * t + a[1]) * t + a[0]) * delta /
             (((((b[4] * t + b[3]) * t + b[2]) * t + b[1]) * t + b[0]) * t + 1.0))

    if x <= 0.5:
        return -y
    return y


def read_grid(file_path: str) -> np.ndarray:
    """
    Read a digital map of L, m_L, s_L or P_L.

    The file holds 721 rows (latitude -90 to 90 deg) of 1441 whitespace
    separated values (longitude -180 to 180 deg). NaN values are kept.

    Parameters:
    -----------
    file_path : str
        Path to the digital map file

    Returns:
    --------
    grid : np.ndarray
        721 x 1441 array of float64

    Raises:
    -------
    ValueError
        If a row is missing, a row has a wrong number of columns, a value
        cannot be parsed or the file has more rows than expected
    """
    grid = np.empty((Const.N_LAT, Const.N_LON), dtype=np.float64)

    with open(file_path, 'r') as fid:
        for row in range(Const.N_LAT):
            line = fid.readline()

            if not line.strip():
                raise ValueError("Row " + str(row + 1) + " is missing.")

            values = line.split()

            if len(values) < Const.N_LON:
                raise ValueError("Row " + str(row + 1) + " has fewer columns than expected.")
            if len(values) > Const.N_LON:
                raise ValueError("Row " + str(row + 1) + " has more columns than expected.")

            for col, value in enumerate(values):
                try:
                    grid[row, col] = float(value)
                except ValueError as err:
                    raise ValueError("Invalid number at row " + str(row + 1) + ", column " + str(col + 1) +
                                     ": " + value + ".") from err

        for line in fid:
            if line.strip():
                raise ValueError("File has more rows than expected.")

    return grid


def probability_from_suffix(suffix: str) -> float:
    """
    Map the numeric suffix of an L_*.TXT file name to the exceedance
    probability in %: '001' -> 0.01, '05' -> 0.5, '10' -> 10
    """
    val = int(suffix)

    if len(suffix) == 3 and suffix.startswith("00"):
        return val / 100.0
    if len(suffix) == 2 and suffix.startswith("0"):
        return val / 10.0
    return float(val)


def load_grids_by_probability(folder_path: str) -> Dict[float, np.ndarray]:
    """
    Load the digital maps of L(p) (L_*.TXT files, annual or monthly
    statistics) from a folder.

    Files with a non-numeric suffix (e.g. L_mean.TXT, L_std.TXT) are skipped.

    Parameters:
    -----------
    folder_path : str
        Path to the folder of digital maps

    Returns:
    --------
    grids_by_probability : dict
        L(p) grids keyed by exceedance probability p, in %, ascending
    """
    if not os.path.isdir(folder_path) or len(os.listdir(folder_path)) == 0:
        raise FileNotFoundError("Folder is empty or missing: " + folder_path + ".")

    grids = {}

    for filename in sorted(os.listdir(folder_path)):
        m = re.fullmatch(r"L_(\d+)\.txt", filename, flags=re.IGNORECASE)
        if m is None or not filename.startswith("L_"):
            continue

        p = probability_from_suffix(m.group(1))

        try:
            grids[p] = read_grid(os.path.join(folder_path, filename))
        except ValueError as err:
            raise ValueError("Failed to read " + filename + " in " + folder_path + ".") from err

    if len(grids) == 0:
        raise ValueError("No valid L_*.TXT probability maps found in " + folder_path + ".")

    return {p: grids[p] for p in sorted(grids)}


def load_lognormal_grids(folder_path: str) -> LogNormalGrids:
    """Load the digital maps mL.TXT, sL.TXT and PL.TXT from a folder"""
    grids = [read_grid(os.path.join(folder_path, name)) for name in Const.LOGNORMAL_FILES]

    return LogNormalGrids(*grids)
