#!/usr/bin/env python3
"""
Bioequivalence Study - Python Example

Run: python python.py
"""

from bedesign import data, nca


def main():
    print("Bioequivalence Study (2x2 crossover)")
    print("=" * 50)

    name = data.find_dataset("SLF2014_5")
    df = data.ensure_formulation(data.load_dataset(name))

    print(f"Dataset:  {name}")
    print(f"Subjects: {data.n_subjects(df)}")
    print(f"Columns:  {list(df.columns)}")

    # Descriptives
    print("\nDescriptive statistics (AUC):")
    print("-" * 50)
    print(nca.summarize_endpoint(df, "AUC").to_string(index=False))

    # Statistical analysis
    print("\n" + "=" * 50)
    print("BIOEQUIVALENCE ASSESSMENT")
    print("=" * 50)

    results = {ep: nca.run_bioequivalence(df, ep, design="crossover") for ep in ("Cmax", "AUC")}

    print("\nParameter   GMR      90% CI           CV%     Within BE Limits?")
    print("-" * 66)
    for ep, res in results.items():
        be = "Yes" if res.bioequivalent else "No"
        print(f"{ep:<10}  {res.gmr:.4f}   [{res.ci_lower:.4f}, {res.ci_upper:.4f}]   "
              f"{res.cv_pct:5.1f}   {be}")

    # Overall conclusion
    print("\n" + "=" * 50)
    overall_be = all(res.bioequivalent for res in results.values())
    if overall_be:
        print("CONCLUSION: Bioequivalence DEMONSTRATED")
    else:
        print("CONCLUSION: Bioequivalence NOT demonstrated")
    print("=" * 50)

    return {
        "cmax": results["Cmax"],
        "auc": results["AUC"],
        "bioequivalent": overall_be,
    }


if __name__ == "__main__":
    main()
