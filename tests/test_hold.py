import unittest

from copypose.game.hold import HoldConfirmation, HoldPhase

from fakes import FakeClock


class TestCountMode(unittest.TestCase):
	def setUp(self):
		self.hold = HoldConfirmation(mode="count", hold_frames=50)

	def test_49_then_negative_does_not_confirm(self):
		for _ in range(49):
			self.assertFalse(self.hold.update(True).confirmed)
		self.assertEqual(self.hold.evidence, 49)
		upd = self.hold.update(False)
		self.assertFalse(upd.confirmed)
		self.assertEqual(upd.phase, HoldPhase.IDLE)
		self.assertEqual(self.hold.evidence, 0)

	def test_50th_consecutive_positive_confirms_once(self):
		for _ in range(49):
			self.hold.update(True)
		self.hold.update(False)
		confirmations = 0
		for i in range(50):
			upd = self.hold.update(True)
			if upd.confirmed:
				confirmations += 1
				self.assertEqual(i, 49)
				self.assertEqual(upd.phase, HoldPhase.CONFIRMED)
				self.assertEqual(upd.progress, 1.0)
		self.assertEqual(confirmations, 1)
		self.assertEqual(self.hold.evidence, 0)
		self.assertEqual(self.hold.phase, HoldPhase.IDLE)

	def test_progress_fraction(self):
		for _ in range(10):
			upd = self.hold.update(True)
		self.assertEqual(upd.phase, HoldPhase.HOLDING)
		self.assertAlmostEqual(upd.progress, 0.2)
		self.assertAlmostEqual(self.hold.progress, 0.2)

	def test_reset(self):
		for _ in range(10):
			self.hold.update(True)
		self.hold.reset()
		self.assertEqual(self.hold.evidence, 0)
		self.assertEqual(self.hold.phase, HoldPhase.IDLE)


class TestTimeMode(unittest.TestCase):
	def setUp(self):
		self.clock = FakeClock(1000.0)
		self.hold = HoldConfirmation(mode="time", hold_ms=3000, clock=self.clock)

	def test_evidence_strictly_increases_while_holding(self):
		last = -1.0
		for _ in range(10):
			upd = self.hold.update(True)
			self.assertGreater(upd.evidence, last)
			last = upd.evidence
			self.clock.advance(100)

	def test_negative_resets_even_at_2999ms(self):
		self.hold.update(True)
		self.clock.advance(2999)
		upd = self.hold.update(True)
		self.assertFalse(upd.confirmed)
		self.assertEqual(upd.evidence, 2999)
		upd = self.hold.update(False)
		self.assertEqual(upd.evidence, 0)
		self.assertEqual(self.hold.evidence, 0)
		self.assertEqual(self.hold.phase, HoldPhase.IDLE)
		# The next hold starts from scratch.
		self.clock.advance(10)
		self.assertEqual(self.hold.update(True).evidence, 0)

	def test_confirms_at_duration(self):
		self.hold.update(True)
		self.clock.advance(1500)
		upd = self.hold.update(True)
		self.assertAlmostEqual(upd.progress, 0.5)
		self.clock.advance(1500)
		upd = self.hold.update(True)
		self.assertTrue(upd.confirmed)
		self.assertEqual(self.hold.phase, HoldPhase.IDLE)
		self.assertEqual(self.hold.evidence, 0)

	def test_new_hold_after_confirmation_restarts_timer(self):
		self.hold.update(True)
		self.clock.advance(3000)
		self.assertTrue(self.hold.update(True).confirmed)
		self.clock.advance(500)
		upd = self.hold.update(True)
		self.assertFalse(upd.confirmed)
		self.assertEqual(upd.evidence, 0)


class TestInstantMode(unittest.TestCase):
	def test_first_positive_confirms(self):
		hold = HoldConfirmation(mode="instant")
		self.assertFalse(hold.update(False).confirmed)
		self.assertTrue(hold.update(True).confirmed)
		self.assertTrue(hold.update(True).confirmed)


class TestValidation(unittest.TestCase):
	def test_unknown_mode(self):
		with self.assertRaises(ValueError):
			HoldConfirmation(mode="windowed")

	def test_zero_frames(self):
		with self.assertRaises(ValueError):
			HoldConfirmation(mode="count", hold_frames=0)


if __name__ == "__main__":
	unittest.main(verbosity=2)
