"""CPU parts: registers, decoder, ALU."""
