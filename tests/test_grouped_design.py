import numpy as np
import pytest

from abnscore.design import Dataset, Network
from abnscore.grouped_design import build_design_gaus_rv


def _network():
    # node 0 has parents 1 and 2; node 1 has none
    dag = np.array([[0, 1, 1], [0, 0, 0], [0, 0, 0]])
    return Network(dag=dag, max_parents=2)


def _data():
    values = np.array(
        [
            [1.5, 0.1, 2.0],
            [2.5, 0.2, 3.0],
            [3.5, 0.3, 4.0],
            [4.5, 0.4, 5.0],
            [5.5, 0.5, 6.0],
        ]
    )
    group_ids = np.array([2, 1, 2, 1, 1])
    return Dataset(values=values, group_ids=group_ids)


def _build(network=None, data=None, node_id=0, store_modes=False):
    return build_design_gaus_rv(
        network or _network(), data or _data(), node_id, 0.0, 1000.0, 0.001, 1.0 / 0.001, store_modes
    )


def test_groups_partition_observations_in_order():
    data = _data()
    design = _build(data=data)
    assert design.num_groups == 2
    np.testing.assert_array_equal(design.group_y[0], data.values[[1, 3, 4], 0])
    np.testing.assert_array_equal(design.group_y[1], data.values[[0, 2], 0])
    assert sum(len(g) for g in design.group_y) == design.num_obs


def test_group_design_columns():
    data = _data()
    design = _build(data=data)
    first = design.group_designs[0]
    assert first.shape == (3, 4)
    np.testing.assert_array_equal(first[:, 0], np.ones(3))
    np.testing.assert_array_equal(first[:, -1], np.ones(3))
    np.testing.assert_array_equal(first[:, 1:3], data.values[[1, 3, 4]][:, [1, 2]])


def test_design_without_random_effect_column():
    data = _data()
    design = _build(data=data)
    assert design.num_params == 3
    np.testing.assert_array_equal(design.X_no_rv[:, 0], np.ones(5))
    np.testing.assert_array_equal(design.X_no_rv[:, 1:], data.values[:, [1, 2]])
    np.testing.assert_array_equal(design.y, data.values[:, 0])


def test_priors_are_filled():
    design = _build()
    np.testing.assert_array_equal(design.prior_mean, np.zeros(3))
    np.testing.assert_array_equal(design.prior_sd, np.full(3, 1000.0))
    assert design.prior_gamma_shape == 0.001
    assert design.prior_gamma_scale == pytest.approx(1.0 / 0.001)


def test_node_without_parents_has_intercept_only():
    design = _build(node_id=1)
    assert design.num_params == 1
    for matrix in design.group_designs:
        np.testing.assert_array_equal(matrix, np.ones((matrix.shape[0], 2)))


def test_store_modes_marks_precisions():
    network = _network()
    _build(network=network, store_modes=True)
    row = network.modes[0]
    np.testing.assert_array_equal(row[[0, 2, 3, 4, 5]], np.ones(5))
    assert np.isnan(row[1])


def test_without_store_modes_leaves_modes_untouched():
    network = _network()
    _build(network=network, store_modes=False)
    assert np.isnan(network.modes).all()


def test_missing_group_ids_raises():
    data = Dataset(values=_data().values)
    with pytest.raises(ValueError):
        _build(data=data)


def test_empty_group_raises():
    data = Dataset(values=_data().values, group_ids=np.array([1, 3, 1, 3, 1]))
    with pytest.raises(ValueError):
        _build(data=data)


def test_mismatched_node_count_raises():
    data = Dataset(values=np.ones((3, 2)), group_ids=np.array([1, 1, 2]))
    with pytest.raises(ValueError):
        _build(data=data)