#!/usr/bin/env python3
"""
Power Analysis - Python Example

Run: python python.py
"""

import math

from bedesign import trial


def main():
    print("ABE Planning Power and Sample Size")
    print("=" * 60)

    # 1. Power at a given sample size
    print("\n1. POWER CALCULATION")
    print("-" * 40)

    result = trial.simulate_power(
        trial.SimulationParameters(n=24, cv_pct=25.0, gmr=0.95, design="crossover", nsim=20000),
        rng=42,
    )

    print("Given:")
    print("  N total:      24 (2x2 crossover)")
    print("  CV:           25%")
    print("  True GMR:     0.95")
    print(f"\nEstimated power: {result.power:.1%} (MC SE {result.mc_se:.1%})")

    # 2. Sample size for target power
    print("\n" + "=" * 60)
    print("2. SAMPLE SIZE ESTIMATION")
    print("-" * 40)

    ss_result = trial.find_sample_size(
        target_power=0.80,
        cv_pct=25.0,
        gmr=0.95,
        design="crossover",
        rng=42,
    )
    print(ss_result.describe())

    # 3. Adjust for dropout
    print("\n" + "=" * 60)
    print("3. DROPOUT ADJUSTMENT")
    print("-" * 40)

    dropout_rate = 0.15
    adjusted_n = None
    if ss_result.found:
        adjusted_n = 2 * math.ceil(ss_result.n / (1 - dropout_rate) / 2)
        print(f"Expected dropout: {dropout_rate:.0%}")
        print(f"Unadjusted N:     {ss_result.n}")
        print(f"Adjusted N:       {adjusted_n}")

    # 4. Power table, crossover vs parallel
    print("\n" + "=" * 60)
    print("4. POWER TABLE (CV=25%, GMR=0.95)")
    print("-" * 40)
    print("N total    Crossover    Parallel")
    print("-" * 40)

    for n in [12, 24, 36, 48, 72, 96]:
        p_x = trial.estimate_power(n=n, cv_pct=25.0, gmr=0.95, design="crossover", rng=n)
        p_p = trial.estimate_power(n=n, cv_pct=25.0, gmr=0.95, design="parallel", rng=n)
        print(f"   {n:3d}       {p_x:6.1%}       {p_p:6.1%}")

    # 5. Sample size table by CV
    print("\n" + "=" * 60)
    print("5. SAMPLE SIZE TABLE (80% power, GMR=0.95)")
    print("-" * 40)
    print("CV%      Crossover    Parallel")
    print("-" * 40)

    for cv in [10, 20, 30, 40, 50]:
        cells = []
        for design in ("crossover", "parallel"):
            ss = trial.find_sample_size(0.80, cv_pct=cv, gmr=0.95, design=design, rng=cv)
            cells.append(f"{ss.n:5d}" if ss.found else "  >220")
        print(f"  {cv:3d}       {cells[0]}        {cells[1]}")

    return {
        "power_result": result,
        "sample_size_result": ss_result,
        "adjusted_n": adjusted_n,
    }


if __name__ == "__main__":
    main()
