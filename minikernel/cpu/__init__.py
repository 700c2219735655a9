"""CPU side: instruction cycle, instruction set, MMU, TLB, page cache, interrupts and log."""