import numpy as np

"""
This module provides the momentum helpers used by the body initializers. momentum maps velocity records (vx, vy, vz, mass) to (vx*m, vy*m, vz*m, m), total_momentum sums them over all bodies, and zero_total_momentum removes the net linear momentum by subtracting total.xyz / N / mass_i from each body's velocity while leaving the masses alone. All arithmetic stays in float32 like the state arrays. Masses must be strictly positive; a zero mass yields NaN or Inf velocities and is the caller's responsibility. Empty inputs are returned unchanged.


"""

def momentum(velocities: np.ndarray) -> np.ndarray:
	vel = np.asarray(velocities, dtype=np.float32)
	out = vel * vel[:, 3:4]
	out[:, 3] = vel[:, 3]
	return out


def total_momentum(velocities: np.ndarray) -> np.ndarray:
	if len(velocities) == 0:
		return np.zeros(4, dtype=np.float32)
	return momentum(velocities).sum(axis=0, dtype=np.float32)


def zero_total_momentum(velocities: np.ndarray) -> np.ndarray:
	vel = np.array(velocities, dtype=np.float32, copy=True)
	n = len(vel)
	if n == 0:
		return vel
	total = total_momentum(vel)
	vel[:, :3] -= total[:3] / np.float32(n) / vel[:, 3:4]
	return vel
