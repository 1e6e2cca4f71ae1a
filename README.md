# parkernels

A collection of small compute kernels for studying parallelism. Each kernel
has a plain serial version and a threaded or vectorised version whose output
can be checked against it.

What is included:

- **Mandelbrot** (`parkernels.mandelbrot`): the iteration-count image of the
  Mandelbrot set in single precision, computed serially
  (`mandelbrot_serial`) or with rows interleaved across threads
  (`mandelbrot_thread`, at most 32 threads). `view_for_index` gives the
  default view (index 0 or 1) or a zoomed-in view (index 2), and
  `verify_result` compares two images and prints the first mismatch.
- **PPM output** (`parkernels.ppm`): `ppm_bytes` encodes iteration counts as
  a greyscale P6 image and `write_ppm_image` writes it to a file.
- **Simulated vector unit** (`parkernels.vecintrin`): a fixed-width vector
  machine (`VectorUnit`, width 4 by default) with masked lanes, `Vector`
  registers and `Mask` predicates. Every instruction is recorded by a
  `Logger`, which can print lane-usage statistics (`format_stats`) and an
  execution log (`format_log`).
- **Vector programs** (`parkernels.vector_programs`): absolute value, clamped
  power and array sum, each written serially and with the vector unit.
- **k-means** (`parkernels.kmeans`): threaded cluster assignment, centroid
  and cost updates, and `kmeans_thread`, which iterates until no cluster cost
  moves by more than a threshold.
- **k-means data files** (`parkernels.kmeans_io`): `KMeansData`, a binary
  dataset format (`write_data`, `read_data`) and a sampled text log of the
  clustering state (`log_to_file`).

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command-line program

`parkernels-vecintrin` fills a workload with random values and exponents,
runs the clamped power both serially and on the vector unit, checks that they
agree, prints the vector unit statistics, and then checks the vector array
sum against the serial one (when the size is a multiple of the vector width).

```
parkernels-vecintrin                  # workload size 16
parkernels-vecintrin --size 32 --log  # larger workload, print the execution log
```

Options: `-s`/`--size <N>` sets the workload size, `-l`/`--log` prints the
execution log, `-?`/`--help` shows the usage.

## Using the library

```python
from parkernels.mandelbrot import view_for_index, mandelbrot_serial, mandelbrot_thread, verify_result
from parkernels.ppm import write_ppm_image

view = view_for_index(1)
gold = mandelbrot_serial(view, 400, 300, 256, 0, 300)
fast = mandelbrot_thread(4, view, 400, 300, 256)
assert verify_result(gold, fast)
write_ppm_image(fast, 400, 300, "mandelbrot.ppm", 256)
```

The vector unit keeps a log of every instruction it executes:

```python
from parkernels.vecintrin import VectorUnit
from parkernels.vector_programs import clamped_exp_serial, clamped_exp_vector

unit = VectorUnit()
values = [1.5, -0.5, 2.0, 0.9, 1.1]
exponents = [3, 0, 4, 2, 1]
result = clamped_exp_vector(unit, values, exponents)
print(unit.logger.format_stats())
```

k-means on a dataset stored on disk:

```python
from parkernels.kmeans import kmeans_thread
from parkernels.kmeans_io import read_data

dataset = read_data("data.dat")
centroids, assignments = kmeans_thread(
    dataset.data, dataset.centroids, dataset.assignments, dataset.epsilon
)
```

## What the package does not do

- The only command is `parkernels-vecintrin`. The Mandelbrot and k-means
  kernels are library functions only; there is no command that runs them,
  times them or reports a speedup, and no generator of random k-means
  datasets.
- There is no timing facility; time the functions yourself (for example with
  `time.perf_counter`).
- There are no square-root or SAXPY kernels.