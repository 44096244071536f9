"""Pipeline core: types, kinematics, debounce, target fields, morph."""
