#!/usr/bin/env python3
"""
Parallel vs Crossover Design Comparison - Python Example

Writes outputs/, docs/ and figures_project1/ below ./project_output.

Run: python python.py
"""

from bedesign import PowerConfig, ProjectConfig, run_project, setup_logging


def main():
    setup_logging("INFO")

    config = ProjectConfig(root="project_output", power=PowerConfig(nsim=8000, seed=12345))
    result = run_project(config)

    print("\nParallel vs Crossover")
    print("=" * 60)
    for study in result.studies.values():
        if not study.loaded:
            print(f"{study.label}: dataset missing")
            continue
        auc = study.bioequivalence.get("AUC")
        if auc is not None:
            print(f"{study.label:<10} AUC GMR {auc.gmr:.4f} "
                  f"[{auc.ci_lower:.4f}, {auc.ci_upper:.4f}] -> {auc.conclusion}")
        if study.planning is not None:
            print(f"{'':<10} {study.planning.search.describe()}")

    print("\nSaved:")
    for path in result.written:
        print(f" - {path}")

    return result


if __name__ == "__main__":
    main()
