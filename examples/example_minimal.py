
import numpy as np
from mvloess import loess

rng = np.random.default_rng(0)
x = rng.uniform(0.0, 10.0, size=(2000, 2))
v = np.sin(x[:, 0]) * np.cos(x[:, 1]) + rng.normal(0.0, 0.1, len(x))
v[rng.choice(len(x), 40, replace=False)] += 5.0  # outliers

g = np.linspace(0.0, 10.0, 50)
gx, gy = np.meshgrid(g, g)
xi = np.column_stack([gx.ravel(), gy.ravel()])

fitted, weights = loess(x, v, xi, span=0.05, niter=3, order=2, show_progress=True, return_weights=True)
print(f"grid fitted: {np.isfinite(fitted).sum():,} / {len(fitted):,}")
print(f"inputs down-weighted to zero: {(weights == 0).sum():,}")

try:
    import matplotlib.pyplot as plt
    from mvloess.viz import plot_robustness_weights

    plot_robustness_weights(x, weights)
    plt.savefig("robustness_weights.png", dpi=120)
    print("Saved to robustness_weights.png")
except Exception as e:
    print(f"Plot not saved ({e}).")
