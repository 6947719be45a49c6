class SimulationError(RuntimeError):
    pass


class ProgramError(SimulationError):
    """Invalid input for the core: missing/empty program or bad data image."""
    pass


class MemoryAccessError(SimulationError):
    def __init__(self, cycle: int, address: int) -> None:
        self.cycle   = cycle
        self.address = address
        super().__init__(f'Data memory access out of range at cycle {cycle}: address {address}')
