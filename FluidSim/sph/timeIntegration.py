# -- SPH Time Integration -- #

'''
Symplectic (semi-implicit) Euler integration for the particle fluid.

    v(t+dt) = v(t) + dt * F(t) / m      (kick)
    x(t+dt) = x(t) + dt * v(t+dt)       (drift)

The drift uses the updated velocity, which is what makes the scheme
symplectic: it does not accumulate the steady energy drift of plain
explicit Euler.

References:
-----------
Hairer et al. (2003) -- Geometric Numerical Integration

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

from typing import Protocol

from FluidSim.sph.particles import ParticleSystem


######################################################################
# -- Time Integrator Protocol -- #
######################################################################

class TimeIntegrator(Protocol):
    '''Protocol for time integration schemes.'''

    def integrate(self, particles: ParticleSystem, dt: float, mass: float) -> None:
        '''Advance velocities and positions by one time step in place.'''
        ...


######################################################################
# -- Symplectic Euler Integrator -- #
######################################################################

class SymplecticEuler:
    '''
    Kick-drift semi-implicit Euler integrator.

    Velocity is updated from the force first, then position from the
    already-updated velocity. Boundary handling is applied separately
    after the drift.
    '''

    def integrate(self, particles: ParticleSystem, dt: float, mass: float) -> None:
        '''
        Advance all particles by one time step.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle system to advance (forces already computed)
        dt : float
            Time step
        mass : float
            Particle mass
        '''
        # Kick
        particles.velocities += (dt / mass) * particles.forces

        # Drift
        particles.positions += dt * particles.velocities
