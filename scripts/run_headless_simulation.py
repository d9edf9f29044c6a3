import os, sys, argparse, random
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
from clusterlab.session import create_visualization

parser = argparse.ArgumentParser(description='Run a session to completion without a window.')
parser.add_argument('--mode', default='kmeans', choices=('kmeans', 'tsne'))
parser.add_argument('--dataset', default='clusters')
parser.add_argument('--seed', type=int, default=7)
parser.add_argument('--final', action='store_true', help='jump straight to the final layout (tsne)')
args = parser.parse_args()

session = create_visualization(args.mode, random.Random(args.seed))
session.resize(800, 600)
session.select_dataset(args.dataset)
session.set_show_trails(True)

if args.final:
    session.show_final()
else:
    session.start()
    frames = 0
    while session.running and frames < 1000:
        session.advance()
        frames += 1

snap = session.snapshot()
labels = {}
for point in snap.points:
    labels[point.cluster] = labels.get(point.cluster, 0) + 1

print('Mode:', snap.kind, '| dataset:', snap.dataset)
print('Iterations:', snap.iteration, '/', snap.max_iterations, '| complete:', snap.complete)
print('Points per label:', dict(sorted(labels.items())))
if snap.centroids is not None:
    print('Centroids:', [(round(c.x, 1), round(c.y, 1)) for c in snap.centroids])
print('Longest trail:', max((len(p.trail) for p in snap.points), default=0))
