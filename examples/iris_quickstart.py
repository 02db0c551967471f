from time import perf_counter

from sklearn.datasets import load_iris

from cartpy import DecisionTreeClassifier, enable_logging

data = load_iris()
X, y = data.data, data.target
feats = list(data.feature_names)

clf = DecisionTreeClassifier(criterion="gini", max_depth=3, min_samples_leaf=5)

with enable_logging(level="INFO"):
    t0 = perf_counter(); clf.fit(X, y); print(f"fit: {perf_counter()-t0:.3f} s")
clf.print_tree(feature_names=feats)
print(f"train accuracy: {clf.score(X, y):.3f}")
