from time import perf_counter

from sklearn.datasets import load_iris

from charon import TreeClassifier, enable_logging

data = load_iris()
feats = [n.replace(" (cm)", "").replace(" ", "_") for n in data.feature_names]
classes = list(data.target_names)

clf = TreeClassifier(min_leaf=5, holdout=0.2, max_splits=4, feature_names=feats, random_state=42)

with enable_logging(level="INFO"):
    t0 = perf_counter(); clf.fit(data.data, data.target); print(f"fit: {perf_counter()-t0:.3f} s")

print(f"training accuracy: {clf.training_quality_:.3f}  holdout accuracy: {clf.holdout_quality_:.3f}")
clf.print_tree(class_names=classes)
for rule in clf.export_rules(class_names=classes):
    print(rule)
try:
    clf.export_graphviz("iris_tree", class_names=classes, format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
