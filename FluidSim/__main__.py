# -- FluidSim Module Entry-Point -- #

'''
Allows running the simulation with `python -m FluidSim`.

Sean Bowman [10/19/2026]
'''

from FluidSim.runner import main


if __name__ == '__main__':
    main()
