"""
Verify sanity checks are working:
1. Edge/collection mirror holds after loading and after every strategy
2. Terminated processes leave no edges behind
3. Preempted processes hold nothing and keep their requests
4. A divergent mirror is reported
"""
import sys
import io
sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')

from utils.graph_loader import load_graph
from models.graph import ResourceGraph
from models.process import Process
from algorithms.detection import detect
from algorithms.recovery import apply_strategy, propose_prevention

graph_path = "scenarios/three_way_cycle.json"
graph = load_graph(graph_path)

print("="*60)
print("SANITY CHECK VERIFICATION")
print("="*60)

# Loaded state
print("\n1. Mirror check on loaded graph...")
try:
    graph.assert_mirror_consistency("after load")
    print("   ✓ Edges and process collections agree")
except AssertionError as e:
    print(f"   ✗ FAILED: {e}")
    sys.exit(1)

print("\n2. Detecting deadlock...")
result = detect(graph)
print(f"   {result.describe()}")
if not result.deadlock:
    print("   ✗ FAILED: scenario should be deadlocked")
    sys.exit(1)

strategies = propose_prevention(graph, result.cycle)

# Every strategy keeps the mirror
print("\n3. Mirror check after each strategy...")
for strategy in strategies:
    after = apply_strategy(graph, strategy)
    try:
        after.assert_mirror_consistency(f"after {strategy.kind.value}")
        print(f"   ✓ {strategy.title}: mirror holds")
    except AssertionError as e:
        print(f"   ✗ FAILED: {e}")
        sys.exit(1)

# Termination removes every edge of the victim
print("\n4. Verify terminated process leaves no edges...")
victim = result.cycle[-1]
terminated = apply_strategy(graph, strategies[1])
leftover = [str(e) for e in terminated.edges if e.process_id == victim]
if victim not in terminated.process_ids and not leftover:
    print(f"   ✓ {victim} and its edges removed")
else:
    print(f"   ✗ FAILED: {victim} still present or has edges: {leftover}")
    sys.exit(1)

# Preemption keeps requests
print("\n5. Verify preempted process keeps its requests...")
victim = result.cycle[0]
preempted = apply_strategy(graph, strategies[0]).get_process(victim)
if preempted.allocated == () and preempted.requesting == graph.get_process(victim).requesting:
    print(f"   ✓ {victim} holds nothing, still requests {list(preempted.requesting)}")
else:
    print(f"   ✗ FAILED: unexpected state after preemption: {preempted}")
    sys.exit(1)

# Simulated violation
print("\n6. Verify divergent mirror check (simulated violation)...")
broken = ResourceGraph(
    processes=tuple(Process(p.process_id) for p in graph.processes),
    resources=graph.resources,
    edges=graph.edges
)
try:
    broken.assert_mirror_consistency("divergent mirror test")
    print("   ✗ FAILED: Should have caught the divergent mirror")
    sys.exit(1)
except AssertionError:
    print("   ✓ Divergent mirror properly detected")

print("\n" + "="*60)
print("ALL SANITY CHECKS PASSED ✓")
print("="*60)
