#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
  This script is used to validate the python implementation of
  Recommendation ITU-R P.840 as defined in the package Py840
  against the ITU-R reference tables

  Expected layout (relative to the working directory):
    ./data/annual/L_*.TXT               annual digital maps of L(p)
    ./data/month02/ .. month11/         monthly digital maps of L(p)
    ./data/logNormalAnnual/{mL,sL,PL}.TXT
    ./validation_examples/*.csv         reference tables (two header rows)

  Revision History:
  Date            Revision
  19OCT26       Initial version
"""

import os

import pandas as pd

from Py840 import P840

abs_tol = 1e-6
rel_tol = 5e-4  # relative tolerance of the reference tables

# path to the folder containing the digital maps and the reference tables
maps = "./data/"
test_tables = "./validation_examples/"

MONTHS = [2, 5, 8, 11]

cnt_fail = 0
cnt_pass = 0


def check(name, computed, expected):
    global cnt_fail, cnt_pass

    ok = abs(computed - expected) <= max(abs_tol, rel_tol * abs(expected))
    if ok:
        cnt_pass += 1
    else:
        cnt_fail += 1

    print(f'{name:>16s} {computed:>20.10f} {expected:>20.10f} {"" if ok else "FAIL":>6s}')


def read_table(filename):
    return pd.read_csv(os.path.join(test_tables, filename), skiprows=2, header=None)


if not os.path.isdir(test_tables):
    raise SystemExit("The system cannot find the given folder " + test_tables)

print(f'{"":>16s} {"Python":>20s} {"REF TABLE":>20s}')

# Annual L(p): lat, lon, p, L(p)
annual = P840.load_grids_by_probability(os.path.join(maps, P840.Const.ANNUAL_DIR))

df = read_table("annualLpTest.csv")
for idx, row in enumerate(df.itertuples(index=False), start=1):
    lat, lon, p, L_ref = row[:4]
    print(f"\nannualLpTest {idx}: lat = {lat}, lon = {lon}, p = {p}")
    check("L(p)", P840.lp(lat, lon, p, annual), L_ref)

# Monthly L(p): lat, lon, p, L(p) for February, May, August, November
monthly = {m: P840.load_grids_by_probability(os.path.join(maps, P840.Const.monthly_dir(m))) for m in MONTHS}

df = read_table("monthlyLpTest.csv")
for idx, row in enumerate(df.itertuples(index=False), start=1):
    lat, lon, p = row[:3]
    for i, m in enumerate(MONTHS):
        print(f"\nmonthlyLpTest {idx} (month {m}): lat = {lat}, lon = {lon}, p = {p}")
        check("L(p)", P840.lp(lat, lon, p, monthly[m]), row[3 + i])

# Annual attenuation: lat, lon, p, f, theta, eps', eps'', eta, K_L, L(p), A_c
df = read_table("annualAttenuationTest.csv")
for idx, row in enumerate(df.itertuples(index=False), start=1):
    lat, lon, p, f, theta = row[:5]
    print(f"\nannualAttenuationTest {idx}: lat = {lat}, lon = {lon}, p = {p}, f = {f} GHz, theta = {theta} deg")

    K_L = P840.mass_absorption_coefficient(f)

    check("eps'", P840.epsilon_real(f), row[5])
    check("eps''", P840.epsilon_imag(f), row[6])
    check("eta", P840.eta(f), row[7])
    check("K_L", K_L, row[8])
    check("L(p)", P840.statistical_attenuation(f, lat, lon, p, 90.0, annual) / K_L, row[9])
    check("A_c", P840.statistical_attenuation(f, lat, lon, p, theta, annual), row[10])

# Log-normal attenuation: lat, lon, p, f, theta, K_L, m_L, s_L, P_L, term, A_c(90), A_c
ln = P840.load_lognormal_grids(os.path.join(maps, P840.Const.LOGNORMAL_DIR))

df = read_table("logNormalAnnualAttenuationTest.csv")
for idx, row in enumerate(df.itertuples(index=False), start=1):
    lat, lon, p, f, theta = row[:5]
    print(f"\nlogNormalAnnualAttenuationTest {idx}: lat = {lat}, lon = {lon}, p = {p}, f = {f} GHz, theta = {theta} deg")

    m_L = P840.bilinear_interpolation(lat, lon, ln.m_L)
    s_L = P840.bilinear_interpolation(lat, lon, ln.s_L)
    P_L = P840.bilinear_interpolation(lat, lon, ln.P_L)

    check("K_L", P840.mass_absorption_coefficient(f), row[5])
    check("m_L", m_L, row[6])
    check("s_L", s_L, row[7])
    check("P_L", P_L, row[8])
    check("term", P840.lognormal_term(p, m_L, s_L, P_L), row[9])
    check("A_c(90)", P840.lognormal_attenuation(f, lat, lon, p, 90.0, ln.m_L, ln.s_L, ln.P_L), row[10])
    check("A_c", P840.lognormal_attenuation(f, lat, lon, p, theta, ln.m_L, ln.s_L, ln.P_L), row[11])

print(f'\nSuccessfully passed {cnt_pass} out of {cnt_pass + cnt_fail} tests')

if cnt_fail > 0:
    raise SystemExit(1)
