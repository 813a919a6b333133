import random
import unittest
from collections import Counter

from copypose.assets import PoseAssetNotFound
from copypose.game.sequence import ReferencePose, build_sequence, current, load_sequence

from fakes import FakeLoader


class TestBuildSequence(unittest.TestCase):
	def test_is_permutation(self):
		rng = random.Random(1)
		for n in range(0, 12):
			order = build_sequence(n, rng)
			self.assertEqual(sorted(order), list(range(1, n + 1)))
			self.assertEqual(len(set(order)), n)

	def test_negative_length_rejected(self):
		with self.assertRaises(ValueError):
			build_sequence(-1)

	def test_seeded_rng_is_reproducible(self):
		a = build_sequence(7, random.Random(42))
		b = build_sequence(7, random.Random(42))
		self.assertEqual(a, b)

	def test_positions_are_uniform(self):
		n, trials = 5, 20000
		rng = random.Random(1234)
		counts = [Counter() for _ in range(n)]
		for _ in range(trials):
			for pos, val in enumerate(build_sequence(n, rng)):
				counts[pos][val] += 1
		expected = trials / n
		for pos in range(n):
			self.assertEqual(set(counts[pos]), set(range(1, n + 1)))
			for val in range(1, n + 1):
				# ~4000 expected, sd ~57; 10% is far outside noise but catches bias.
				self.assertLess(abs(counts[pos][val] - expected), expected * 0.1)

	def test_all_permutations_reachable(self):
		rng = random.Random(7)
		seen = {tuple(build_sequence(3, rng)) for _ in range(600)}
		self.assertEqual(len(seen), 6)


class TestLoadSequence(unittest.TestCase):
	def test_order_preserved(self):
		loader = FakeLoader()
		seq = load_sequence([3, 1, 2], loader)
		self.assertEqual([p.id for p in seq], [3, 1, 2])
		self.assertEqual(loader.loaded, [3, 1, 2])
		self.assertEqual(seq[0].image, "pose3.png")

	def test_failure_aborts_whole_sequence(self):
		loader = FakeLoader(missing=[2])
		with self.assertRaises(PoseAssetNotFound):
			load_sequence([1, 2, 3], loader)
		# Loading stopped at the failing id.
		self.assertEqual(loader.loaded, [1])


class TestCurrent(unittest.TestCase):
	def test_bounds(self):
		seq = load_sequence([1, 2], FakeLoader())
		self.assertIsInstance(current(seq, 0), ReferencePose)
		self.assertEqual(current(seq, 1).id, 2)
		self.assertIsNone(current(seq, 2))
		self.assertIsNone(current(seq, -1))
		self.assertIsNone(current([], 0))


if __name__ == "__main__":
	unittest.main(verbosity=2)
