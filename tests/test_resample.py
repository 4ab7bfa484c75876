import unittest
from unittest import mock
import numpy as np
from pixstack.domain.models import Resize, ScaleFilter
from pixstack.features.resample.logic import FILTERS, _box, precompute_coeffs, resolve_dimensions, resize_gamma_correct
from pixstack.features.resample.processor import ResampleProcessor
from pixstack.services.rendering.image_processor import process_image


def gradient(h, w):
    img = np.empty((h, w, 4), dtype=np.uint8)
    xs = 100 + 5 * np.arange(w)
    ys = 100 + 5 * np.arange(h)
    img[..., 0] = xs[None, :]
    img[..., 1] = ys[:, None]
    img[..., 2] = 150
    img[..., 3] = 255
    return img


class TestResample(unittest.TestCase):
    def test_coeffs_normalized(self):
        for kind in ScaleFilter:
            for in_size, out_size in ((10, 10), (10, 3), (3, 10), (7, 1)):
                bounds, coeffs = precompute_coeffs(in_size, out_size, kind)
                self.assertEqual(bounds.shape, (out_size, 2))
                for i in range(out_size):
                    xmin, n = bounds[i]
                    self.assertGreaterEqual(xmin, 0)
                    self.assertLessEqual(xmin + n, in_size)
                    self.assertAlmostEqual(coeffs[i, :n].sum(), 1.0, places=9)

    def test_uniform_image_preserved(self):
        img = np.empty((10, 12, 4), dtype=np.uint8)
        img[...] = (100, 150, 200, 255)
        for kind in ScaleFilter:
            for dims in ((12, 10), (5, 7), (30, 3)):
                res = resize_gamma_correct(img, dims, kind)
                self.assertEqual(res.shape, (dims[1], dims[0], 4))
                self.assertTrue(np.all(res == img[0, 0]), f"{kind} {dims}")

    def test_same_size_is_near_identity(self):
        img = gradient(10, 12)
        for kind in ScaleFilter:
            res = resize_gamma_correct(img, (12, 10), kind)
            diff = np.abs(res.astype(int) - img.astype(int))
            self.assertLessEqual(diff.max(), 2, kind)

    def test_downscale_in_linear_light(self):
        img = np.zeros((1, 2, 4), dtype=np.uint8)
        img[0, 1, :3] = 255
        img[..., 3] = 255
        res = resize_gamma_correct(img, (1, 1), ScaleFilter.BOX)
        # 0.5 linear ~ 186 in display values, a naive average gives 128
        self.assertEqual(int(res[0, 0, 0]), round(255 * 0.5 ** (1 / 2.2)))
        self.assertEqual(int(res[0, 0, 3]), 255)

    def test_box_upscale_has_no_holes(self):
        # 12 -> 30 puts several output centers exactly on source pixel edges
        img = np.empty((10, 12, 4), dtype=np.uint8)
        img[...] = (100, 150, 200, 255)
        res = process_image(Resize((30, 10), False, ScaleFilter.BOX), img)
        self.assertEqual(res.shape, (10, 30, 4))
        self.assertTrue(np.all(res == (100, 150, 200, 255)))

    def test_box_kernel_edges(self):
        self.assertEqual(_box(0.5), 1.0)
        self.assertEqual(_box(-0.5), 0.0)

    def test_coeffs_fall_back_to_nearest_tap(self):
        with mock.patch.dict(FILTERS, {ScaleFilter.BOX: (lambda x: 0.0, 0.5)}):
            bounds, coeffs = precompute_coeffs(4, 10, ScaleFilter.BOX)
        for i in range(10):
            n = bounds[i, 1]
            self.assertEqual(coeffs[i, :n].sum(), 1.0)
            self.assertEqual(np.count_nonzero(coeffs[i]), 1)

    def test_resolve_dimensions(self):
        self.assertEqual(resolve_dimensions((50, 0)), (50, 1))
        self.assertEqual(resolve_dimensions((0, 20)), (1, 20))
        self.assertEqual(resolve_dimensions((30, 30)), (30, 30))
        self.assertEqual(resolve_dimensions((-4, 30)), (1, 30))

    def test_processor(self):
        img = gradient(40, 100)
        res = ResampleProcessor(Resize((50, 20), True, ScaleFilter.LANCZOS3)).process(img)
        self.assertEqual(res.shape, (20, 50, 4))
        self.assertEqual(res.dtype, np.uint8)

        same = ResampleProcessor(Resize((0, 0))).process(img)
        self.assertIs(same, img)

    def test_zero_side_coerced_to_one(self):
        img = np.zeros((40, 100, 4), dtype=np.uint8)
        # keep_aspect does not derive the missing side
        self.assertEqual(process_image(Resize((50, 0)), img).shape, (1, 50, 4))
        self.assertEqual(process_image(Resize((0, 7), True), img).shape, (7, 1, 4))
        self.assertEqual(ResampleProcessor(Resize((3, 0), False)).process(gradient(4, 4)).shape, (1, 3, 4))
