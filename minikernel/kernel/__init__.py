"""Kernel side: process control blocks, state queues, schedulers, CPUs, I/O, memory and syscalls."""