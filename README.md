# minikernel

`minikernel` models the parts of a small multiprogrammed operating system
as Python objects that run in one process, driven by threads and queues.

- **Kernel** (`minikernel.kernel`): process control blocks (`Pcb`) move
  between the states NEW, READY, EXEC, BLOCKED, SUSPENDED_BLOCKED,
  SUSPENDED_READY and EXIT, each held in a thread-safe `StateQueue` that
  records how many times and for how long every process was in each state.
  - `LongTermScheduler` admits processes from NEW in FIFO or PMCP
    (smallest process first) order, always preferring SUSPENDED_READY
    processes, and releases finished ones from EXIT, logging their metrics.
  - `MediumTermScheduler` blocks processes, swaps out those that stay
    blocked longer than the configured time, and swaps them back in.
  - `ShortTermScheduler` dispatches READY processes with FIFO, SJF or SRT,
    using an exponential burst estimate; SRT interrupts the running process
    with the longest remaining estimate when a shorter one arrives.
  - `CpuPool`, `IoManager` and `MemoryService` stand for the CPUs, the I/O
    devices and main memory; `SyscallHandler` carries out `IO`, `EXIT`,
    `DUMP_MEMORY` and `INIT_PROC`.
  - `Kernel` (in `minikernel.kernel.scheduler`) wires all of these together.
- **CPU** (`minikernel.cpu`): `InstructionCycle` fetches, decodes and
  executes instructions until a syscall or an interrupt, then empties the
  TLB and writes modified cached pages back. `Mmu` translates addresses over
  multi-level page tables, `Tlb` caches translations (FIFO or LRU),
  `PageCache` holds whole pages (CLOCK or enhanced CLOCK, with write-back),
  and `InterruptFlag` records interrupts from the kernel.
- **I/O device** (`minikernel.io_device`): `IoDevice` serves
  `(pid, duration_ms)` requests by waiting the requested time.

Each side has a logger (`KernelLogger`, `CpuLogger`, `IoLogger`) that writes
its events to a log file and to standard output.

## Installation

No runtime dependencies; Python 3.10 or later. Install from a checkout of
this project with your usual tool; the `test` extra adds pytest.

## Configuration

Each component reads a flat `KEY=value` file (blank lines and `#` comments
are skipped):

```python
from minikernel.config import load_kernel_config, load_io_config, load_cpu_config

kernel_config = load_kernel_config("kernel.config")
io_config = load_io_config("io.config")
cpu_config = load_cpu_config("1", ".")   # reads ./cpu1.config
```

Kernel keys: `PUERTO_ESCUCHA_DISPATCH`, `PUERTO_ESCUCHA_INTERRUPT`,
`PUERTO_ESCUCHA_IO`, `IP_MEMORIA`, `PUERTO_MEMORIA`,
`ALGORITMO_CORTO_PLAZO` (`FIFO`, `SJF`, `SRT`), `ALGORITMO_INGRESO_A_READY`
(`FIFO`, `PMCP`), `ALFA`, `ESTIMACION_INICIAL`, `TIEMPO_SUSPENSION` and
`LOG_LEVEL`. Any other algorithm name raises `ValueError`.

CPU keys: `IP_KERNEL`, `PUERTO_KERNEL_DISPATCH`, `PUERTO_KERNEL_INTERRUPT`,
`IP_MEMORIA`, `PUERTO_MEMORIA`, `LOG_LEVEL`, `ENTRADAS_TLB`, `REEMPLAZO_TLB`
(`FIFO`, anything else means LRU), `ENTRADAS_CACHE`, `REEMPLAZO_CACHE`
(`CLOCK`, anything else means enhanced CLOCK) and `RETARDO_CACHE`. A size of
zero disables the TLB or the cache.

I/O keys: `IP_KERNEL`, `PUERTO_KERNEL` and `LOG_LEVEL`.

`LOG_LEVEL` accepts `TRACE`, `DEBUG`, `INFO`, `WARNING` and `ERROR`.

## Examples

```python
from minikernel.cpu.mmu import level_entries

# Entry followed at each level of a 3-level table with 4 entries per table.
level_entries(13, 3, 4)        # [0, 3, 1]
```

```python
from minikernel.kernel.short_term import estimate_burst

# alpha * actual + (1 - alpha) * previous estimate
estimate_burst(0.5, 10000.0, 4000)   # 7000.0
```

```python
from minikernel.cpu.instructions import decode

decode("WRITE 32 hello")   # Instruction(opcode='WRITE', params=('32', 'hello'))
```

The CPU knows `NOOP`, `WRITE <address> <text>`, `READ <address> <size>`,
`GOTO <pc>` and the syscalls `IO`, `INIT_PROC`, `DUMP_MEMORY` and `EXIT`,
which end execution and hand the process back to the kernel. Any other
opcode raises `UnknownInstructionError`.

## Running the kernel

```python
from minikernel.kernel.scheduler import Kernel

kernel = Kernel(kernel_config, logger, memory_send)
kernel.start("program.txt", 256)   # waits for an empty line, then creates process 0
kernel.connect_cpu("1", cpu_link)
kernel.connect_io("disk", io_link)
```

`memory_send` takes a `MemoryRequest` and returns memory's answer: `1` for
success, `0` for refusal and `-1` for a broken reply (which raises
`MemoryUnavailableError`). `cpu_link` implements `CpuLink` (`dispatch`,
`interrupt`, `close`) and `io_link` implements `IoLink` (`request`, `close`).

## What this package does not do

- It has no command-line programs; the kernel, a CPU and an I/O device are
  started from Python code.
- It opens no network connections. `CpuLink`, `IoLink`, `MemoryClient` and
  the `memory_send` callable are the points where a transport has to be
  supplied.
- It contains no main memory: page tables, frames, swap and memory dumps
  are whatever the supplied `MemoryClient` and `memory_send` provide.